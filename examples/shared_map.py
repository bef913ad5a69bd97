"""
rmap — shared map walkthrough

Two handles opened with the same id read and write one Redis hash.
The hash disappears when the last handle is closed.

Needs a Redis server on localhost:6379 (or RMAP_HOST / RMAP_PORT).
"""

import logging

from rmap import RemoteMap


def main():
    logging.basicConfig(level=logging.DEBUG)

    # ──────────────────────────────────────
    #  1. Two handles, one namespace
    # ──────────────────────────────────────
    with RemoteMap("inventory") as writer, RemoteMap("inventory") as reader:
        writer["apples"] = "12"
        previous = writer.put("apples", "10")
        print(f"apples: {previous} -> {reader['apples']}")

        writer.update(pears="4", plums="0")
        print("stock:", dict(reader.items()))

        # Iteration walks a snapshot, so deleting while iterating is safe
        for entry in reader.items():
            if entry.value == "0":
                reader.keys().remove(entry.key)
        print("after restock check:", reader.copy())

    # ──────────────────────────────────────
    #  2. A private, throwaway map
    # ──────────────────────────────────────
    with RemoteMap() as scratch:
        scratch.setdefault("visits", "1")
        print(scratch, "holds", len(scratch), "entry")


if __name__ == "__main__":
    main()

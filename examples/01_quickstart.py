#!/usr/bin/env python3
"""Example: Quickstart — tomltree

Minimal working example: parse a TOML document, walk the tree,
dump it as JSON and show what a parse error looks like.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install tomltree
"""
from __future__ import annotations

import tomltree
from tomltree.tree import TreeSerializer

TOML_SOURCE = '''
title = "Inventory"
updated = 2024-03-01T09:30:00+01:00

[warehouse]
location = { city = "Oslo", dock = 4 }
bays = [1, 2, 3]

[[warehouse.items]]
name = "Hammer"
sku = 738_594_937

[[warehouse.items]]
name = "Nail"
sku = 0x1A
'''


def main() -> None:
    print(f"tomltree version: {tomltree.__version__}")

    # Step 1: Parse TOML source into a tree
    tree = tomltree.parse(TOML_SOURCE)
    print(f"Top-level keys: {tree.keys()}")

    # Step 2: Walk the tree; table arrays resolve to their last element
    city = tree.get_path(["warehouse", "location", "city"])
    last_item = tree.get_path(["warehouse", "items", "name"])
    print(f"City: {city.value}, last item: {last_item.value}")
    print(f"Updated (UTC): {tree['updated'].value.isoformat()}")

    # Step 3: Dump to JSON with type tags
    print(TreeSerializer().to_json(tree, typed=True)[:200])

    # Step 4: Errors carry a position and a kind
    try:
        tomltree.parse("[a]\nx = 1\n[a]\n")
    except tomltree.ParseError as exc:
        print(f"{exc.kind.name.lower()} error: {exc}")


if __name__ == "__main__":
    main()

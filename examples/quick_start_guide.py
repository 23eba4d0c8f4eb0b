#!/usr/bin/env python3
"""
Quick Start Guide for XML Thinner.

This example walks through thinning a document, inspecting the merged tree,
merging several documents into one shape, and building incrementally from
hand-made events.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from xml_thinner import ThinningConfig, ThinningTreeBuilder, XMLThinner, thin
from xml_thinner.events import end, start, text
from xml_thinner.shared import ChildOrder

CATALOG = """<?xml version="1.0"?>
<catalog>
  <book id="b1" lang="en">
    <title>Dune</title>
    <author>Frank Herbert</author>
  </book>
  <book id="b2">
    <title>Solaris</title>
    <translator>Bill Johnston</translator>
  </book>
  <magazine issue="12"/>
</catalog>
"""


def quick_start_example():
    """Thin one document and look at the result."""

    print("QUICK START - XML Thinner")
    print("=" * 45)

    print("\nStep 1: Thinning a document")
    print("-" * 30)

    result = thin(CATALOG)
    print(f"Success: {result.success}")
    print(f"Distinct nodes: {result.node_count}")
    print(f"Depth: {result.max_depth}")
    print(result.tree.render(), end="")

    print("\nStep 2: Inspecting merged nodes")
    print("-" * 30)

    book = result.tree.find("catalog/book")
    print(f"book children: {list(book.children)}")
    print(f"book attributes (last wins): {book.attributes}")
    for path in result.tree.paths():
        print(f"  {path}")

    print("\nStep 3: Capturing text")
    print("-" * 30)

    captured = thin(CATALOG, ThinningConfig.full_capture())
    print(f"All titles: {captured.tree.find('catalog/book/title').text}")

    print("\nStep 4: Merging a corpus")
    print("-" * 30)

    thinner = XMLThinner(ThinningConfig.corpus())
    merged = thinner.thin_many([
        CATALOG,
        "<catalog><dvd><title/><runtime/></dvd></catalog>",
    ])
    print(merged.tree.render(order=ChildOrder.ALPHABETICAL), end="")

    print("\nStep 5: Handling malformed input")
    print("-" * 30)

    broken = thin("<catalog><book></catalog>")
    print(f"Success: {broken.success}")
    for diagnostic in broken.diagnostics:
        print(f"  {diagnostic.severity.name}: {diagnostic.message}")


def incremental_example():
    """Feed events one at a time and watch the traversal stack."""

    print("\nINCREMENTAL BUILDING")
    print("=" * 45)

    builder = ThinningTreeBuilder()
    builder.begin()
    for event in [start("a"), start("b"), text("x"), end(), start("b"),
                  start("c"), end(), end(), end()]:
        builder.feed(event)
        print(f"{event.type.name:<6} depth={builder.depth} path={builder.current_path}")
    tree = builder.close()
    print(tree.render(), end="")


if __name__ == "__main__":
    quick_start_example()
    incremental_example()

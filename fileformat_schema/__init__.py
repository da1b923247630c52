"""File Format Schema -- verify parsed node-tree documents against versioned schemas.

A document is a tree of nodes, each with a title string, a data string and a
nesting level, produced by a format-specific loader.  A schema describes which
node types may appear, where they may appear relative to each other, and what
their title/data text must look like.

This package provides tools for:
- Declaring node types, schemas and format catalogs (in code or as JSON)
- Matching node text against title/data templates (``<name>``, ``<#>``, ``[...]``, ``$[...]``)
- Verifying a whole tree: file extension, header node, and structure
- Collecting a leveled diagnostic trail for every verification pass
- Verifying batches of files and tabulating the results

Key principles:
- File problems are diagnostics, never exceptions: one pass reports everything
- Schema authoring mistakes are rejected when the schema is built
- Schemas and catalogs are immutable and safe to share between threads

Main subpackages:
- models: FormatNodeDefinition, Schema, FormatCatalog, ParsedNode
- matching: template language and the single-node matcher
- validation: header and tree verification, diagnostics, batch reports
- formats: built-in catalogs (GHDR) and JSON catalog I/O
"""

__all__ = []

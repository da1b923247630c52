"""GHDR file format catalog.

Version 1.0 (``.ghdr``)::

    GHDR:Version 1.0              <- header
    <fileTitle>:                  <- head   (level 0, right after the header)
      <text>:<imagefile>[...]     <- title  (level 1, one or more)

A ``title`` node's data is an image file name followed by one or more
bracketed groups of four integers, e.g. ``bg.png[10,20,300,200]``.
"""

from __future__ import annotations

from fileformat_schema.models.definition import ABSENT, HEAD, FormatNodeDefinition
from fileformat_schema.models.schema import FormatCatalog, Schema

FORMAT_TAG = "GHDR"
VERSION_1 = "Version 1.0"


def _version_1() -> Schema:
    return Schema(
        version_label=VERSION_1,
        version_ordinal=1,
        file_extension=".ghdr",
        definitions=[
            FormatNodeDefinition(
                name="head",
                title_pattern="<fileTitle>",
                data_pattern="",
                level=0,
                prev_siblings=(HEAD,),
                children=("title",),
            ),
            FormatNodeDefinition(
                name="title",
                title_pattern="<text>",
                data_pattern="<imagefile>[$<#>,<#>,<#>,<#>]",
                level=1,
                parents=("head", ABSENT),
                prev_siblings=("title", ABSENT),
                next_siblings=("title", ABSENT),
            ),
        ],
    )


def ghdr_catalog() -> FormatCatalog:
    return FormatCatalog(format_tag=FORMAT_TAG, schemas=[_version_1()])

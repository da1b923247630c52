"""Tests for the tree verifier (extension, header, structural walk)."""

from __future__ import annotations

import pytest

from fileformat_schema.formats import get_format
from fileformat_schema.models.definition import ABSENT, HEAD, FormatNodeDefinition
from fileformat_schema.models.node import ParsedNode, build_outline
from fileformat_schema.models.schema import FormatCatalog, Schema
from fileformat_schema.validation.diagnostics import (
    CANDIDATE_REJECTED,
    CYCLIC_LINK,
    EXTENSION_MISMATCH,
    HEADER_MISMATCH,
    MISSING_NODE,
    NODE_LIMIT,
    NODE_MATCHED,
    UNIDENTIFIED_NODE,
    VERDICT,
)
from fileformat_schema.validation.tree import (
    SchemaVerifier,
    VerifierOptions,
    file_extension,
    verify_file,
    verify_tree,
)


GHDR = get_format("GHDR")
V1 = GHDR.get_schema("Version 1.0")


def _ghdr_tree(*titles):
    return build_outline(
        [
            ("GHDR", "Version 1.0"),
            ("My Game", "", list(titles)),
        ]
    )


# -----------------------------------------------------------------------
# Extension
# -----------------------------------------------------------------------


@pytest.mark.parametrize(
    "path, ext",
    [
        ("1959.ghdr", ".ghdr"),
        ("saves/game.GHDR", ".GHDR"),
        (r"C:\saves\game.ghdr", ".ghdr"),
        ("dir.v2/archive.tar.ghdr", ".tar.ghdr"),
        ("saves/README", ""),
    ],
)
def test_file_extension(path: str, ext: str) -> None:
    assert file_extension(path) == ext


@pytest.mark.parametrize("path", ["a.ghdr", "a.GHDR", "a.Ghdr"])
def test_extension_case_insensitive(path: str) -> None:
    root = _ghdr_tree(("Main Menu", "bg.png[10,20,300,200]"))
    assert verify_tree(GHDR, V1, root, path).ok


def test_extension_mismatch_does_not_stop_walk() -> None:
    root = _ghdr_tree(("Main Menu", "bg.png[10,20,300,200]"), ("Options", "menu.png[0,0,100]"))
    rep = verify_tree(GHDR, V1, root, "game.txt")
    assert not rep.ok
    assert not rep.extension_ok
    assert rep.header_ok
    assert len(rep.by_code(EXTENSION_MISMATCH)) == 1
    # the structural problem is still reported
    assert len(rep.by_code(UNIDENTIFIED_NODE)) == 1


# -----------------------------------------------------------------------
# Conformance / example scenario
# -----------------------------------------------------------------------


def test_conformant_ghdr_file_passes() -> None:
    root = _ghdr_tree(
        ("Main Menu", "bg.png[10,20,300,200]"),
        ("Options", "menu.png[0,0,100,50]"),
        ("Credits", "c.png[1,2,3,4,5,6,7,8]"),
    )
    rep = verify_tree(GHDR, V1, root, "games/1959.ghdr")
    assert rep.ok, rep.summary()
    assert rep.n_nodes == 4
    assert rep.by_code(VERDICT)[0].level == "info"
    assert rep.problems == []


def test_example_second_title_missing_field_is_pinpointed() -> None:
    root = _ghdr_tree(
        ("Main Menu", "bg.png[10,20,300,200]"),
        ("Options", "menu.png[0,0,100]"),
    )
    bad = root.next_sibling.first_child.next_sibling
    rep = verify_tree(GHDR, V1, root, "games/1959.ghdr")
    assert not rep.ok
    assert rep.extension_ok and rep.header_ok and not rep.nodes_ok
    [d] = rep.by_code(UNIDENTIFIED_NODE)
    assert d.node is bad
    assert d.path == "/head[1]/#1"
    assert "Options" in d.message
    assert rep.by_code(VERDICT)[0].level == "warning"


def test_head_requires_a_title_child() -> None:
    root = build_outline([("GHDR", "Version 1.0"), ("My Game", "")])
    rep = verify_tree(GHDR, V1, root, "x.ghdr")
    assert not rep.ok
    [d] = rep.by_code(MISSING_NODE)
    assert d.path == "/head[1]/#0"
    assert "title" in d.message


def test_body_after_header_is_required() -> None:
    root = build_outline([("GHDR", "Version 1.0")])
    rep = verify_tree(GHDR, V1, root, "x.ghdr")
    assert not rep.ok
    assert len(rep.by_code(MISSING_NODE)) == 1


def test_second_top_level_node_rejected() -> None:
    root = build_outline(
        [
            ("GHDR", "Version 1.0"),
            ("My Game", "", [("Main Menu", "bg.png[1,2,3,4]")]),
            ("Another", ""),
        ]
    )
    rep = verify_tree(GHDR, V1, root, "x.ghdr")
    assert not rep.ok
    [d] = rep.by_code(UNIDENTIFIED_NODE)
    assert d.node.title == "Another"


def test_header_failure_still_walks_body() -> None:
    root = build_outline(
        [
            ("GHDX", "Version 7"),
            ("My Game", "", [("Main Menu", "bad")]),
        ]
    )
    rep = verify_tree(GHDR, V1, root, "x.ghdr")
    assert not rep.header_ok
    assert len(rep.by_code(HEADER_MISMATCH)) == 2
    assert len(rep.by_code(UNIDENTIFIED_NODE)) == 1


def test_missing_root() -> None:
    rep = verify_tree(GHDR, V1, None, "x.ghdr")
    assert not rep.ok
    assert rep.by_code(HEADER_MISMATCH)
    assert rep.n_nodes == 0


def test_unidentified_node_subtree_is_not_walked() -> None:
    root = _ghdr_tree(("Main Menu", "bg.png[1,2,3,4]"))
    # broken title with an equally broken child: only the title is reported
    title = root.next_sibling.first_child
    title.data = "broken"
    child = ParsedNode("deeper", "also broken", level=2, parent=title)
    title.first_child = child
    rep = verify_tree(GHDR, V1, root, "x.ghdr")
    assert len(rep.problems) == 1
    assert rep.problems[0].node is title


# -----------------------------------------------------------------------
# ABSENT semantics / first-match policy
# -----------------------------------------------------------------------


def _catalog(defs) -> FormatCatalog:
    return FormatCatalog("DAT", [Schema("Version 1.0", 1, ".dat", defs)])


def test_absent_child_allowed_only_with_sentinel() -> None:
    leaf = FormatNodeDefinition(name="leaf", title_pattern="leaf", level=1)
    optional = FormatNodeDefinition(name="opt", title_pattern="opt", prev_siblings=[HEAD], children=["leaf", ABSENT])
    required = FormatNodeDefinition(name="req", title_pattern="req", prev_siblings=[HEAD], children=["leaf"])
    cat = _catalog([optional, required, leaf])
    s = cat.get_schema("Version 1.0")

    assert verify_tree(cat, s, build_outline([("DAT", "1"), ("opt", "")]), "f.dat").ok
    assert verify_tree(cat, s, build_outline([("DAT", "1"), ("opt", "", [("leaf", "")])]), "f.dat").ok

    rep = verify_tree(cat, s, build_outline([("DAT", "1"), ("req", "")]), "f.dat")
    assert not rep.ok
    assert len(rep.by_code(MISSING_NODE)) == 1
    assert verify_tree(cat, s, build_outline([("DAT", "1"), ("req", "", [("leaf", "")])]), "f.dat").ok


def _first_match_catalog(order) -> FormatCatalog:
    # Both "plain" and "parent" accept any title; only "parent" allows a child.
    plain = FormatNodeDefinition(name="plain", title_pattern="<t>", prev_siblings=[HEAD])
    parent = FormatNodeDefinition(name="parent", title_pattern="<t>", prev_siblings=[HEAD], children=["kid"])
    kid = FormatNodeDefinition(name="kid", title_pattern="kid", level=1)
    by_name = {"plain": plain, "parent": parent}
    return _catalog([by_name[n] for n in order] + [kid])


def test_first_match_binds_and_is_not_retried() -> None:
    tree = build_outline([("DAT", "1"), ("node", "", [("kid", "")])])

    cat = _first_match_catalog(["plain", "parent"])
    rep = verify_tree(cat, cat.get_schema("Version 1.0"), tree, "f.dat")
    # "plain" binds first, so the child is judged against plain.children (absent only)
    assert not rep.ok
    [d] = rep.by_code(UNIDENTIFIED_NODE)
    assert d.node.title == "kid"

    cat = _first_match_catalog(["parent", "plain"])
    assert verify_tree(cat, cat.get_schema("Version 1.0"), tree, "f.dat").ok


# -----------------------------------------------------------------------
# Trail, options, robustness
# -----------------------------------------------------------------------


def test_verification_is_idempotent() -> None:
    root = _ghdr_tree(("Main Menu", "bg.png[10,20,300,200]"), ("Options", "menu.png[0,0,100]"))
    v = SchemaVerifier(GHDR, VerifierOptions(trace=True))
    r1 = v.verify(V1, root, "1959.ghdr")
    r2 = v.verify(V1, root, "1959.ghdr")
    assert r1 == r2
    assert r1.diagnostics == r2.diagnostics


def test_trace_records_candidates() -> None:
    root = _ghdr_tree(("Main Menu", "bg.png[10,20,300,200]"), ("Options", "menu.png[0,0,100]"))
    quiet = verify_tree(GHDR, V1, root, "a.ghdr")
    loud = verify_tree(GHDR, V1, root, "a.ghdr", VerifierOptions(trace=True))
    assert not quiet.by_code(NODE_MATCHED)
    assert len(loud.by_code(NODE_MATCHED)) >= 2
    assert loud.by_code(CANDIDATE_REJECTED)
    assert quiet.ok == loud.ok


def test_long_sibling_chain_does_not_recurse() -> None:
    titles = [(f"T{i}", f"i{i}.png[{i},0,0,0]") for i in range(20000)]
    rep = verify_tree(GHDR, V1, _ghdr_tree(*titles), "big.ghdr")
    assert rep.ok
    assert rep.n_nodes == 20001


def test_cyclic_links_terminate() -> None:
    root = _ghdr_tree(("A", "a.png[1,2,3,4]"), ("B", "b.png[1,2,3,4]"))
    a = root.next_sibling.first_child
    a.next_sibling.next_sibling = a
    rep = verify_tree(GHDR, V1, root, "x.ghdr")
    assert not rep.ok
    assert len(rep.by_code(CYCLIC_LINK)) == 1


def test_max_nodes_limit() -> None:
    root = _ghdr_tree(*[(f"T{i}", "x.png[1,2,3,4]") for i in range(10)])
    rep = verify_tree(GHDR, V1, root, "x.ghdr", VerifierOptions(max_nodes=3))
    assert not rep.ok
    assert rep.n_nodes == 3
    assert len(rep.by_code(NODE_LIMIT)) == 1


def test_report_summary_and_frame() -> None:
    root = _ghdr_tree(("Options", "menu.png[0,0,100]"))
    rep = verify_tree(GHDR, V1, root, "game.txt")
    text = rep.summary()
    assert "FAILED" in text
    assert EXTENSION_MISMATCH in text and UNIDENTIFIED_NODE in text
    df = rep.to_frame()
    assert list(df.columns) == ["level", "code", "path", "message"]
    assert len(df) == len(rep.diagnostics)
    assert not bool(rep)


def test_options_roundtrip() -> None:
    o = VerifierOptions(trace=True, max_nodes=10)
    assert VerifierOptions.from_dict(o.to_dict()) == o


# -----------------------------------------------------------------------
# verify_file (loader collaborator)
# -----------------------------------------------------------------------


def test_verify_file_uses_loader() -> None:
    seen = []

    def loader(path: str):
        seen.append(path)
        return _ghdr_tree(("Main Menu", "bg.png[10,20,300,200]"))

    rep = verify_file(GHDR, "Version 1.0", "saves/1959.ghdr", loader)
    assert rep.ok
    assert seen == ["saves/1959.ghdr"]


def test_verify_file_unknown_version() -> None:
    with pytest.raises(KeyError):
        verify_file(GHDR, "Version 9.9", "x.ghdr", lambda p: None)

"""
Unit Tests — Repair Rules
=========================
Rule matching and each deterministic transform.
"""
import pytest

from app.models.diagnostic import Diagnostic, SourceFormat
from app.repair.rules import (
    RepairRule,
    apply_rule,
    match_rule,
    remove_unused_import,
    narrow_explicit_any,
    escape_jsx_entities,
    use_head_component,
    merge_react_imports,
    drop_duplicate_default_exports,
)


def _diag(line=1, message="", rule_id=None, column=1, file="./src/components/Create.tsx"):
    return Diagnostic(
        file=file,
        line=line,
        column=column,
        message=message,
        rule_id=rule_id,
        source_format=SourceFormat.LINT if rule_id else SourceFormat.TYPE_CHECKER,
    )


# ===========================================================================
# 1. Matching
# ===========================================================================
class TestMatchRule:

    @pytest.mark.parametrize("rule_id,expected", [
        ("@typescript-eslint/no-unused-vars", RepairRule.UNUSED_IMPORT),
        ("no-unused-vars", RepairRule.UNUSED_IMPORT),
        ("@typescript-eslint/no-explicit-any", RepairRule.EXPLICIT_ANY),
        ("react/no-unescaped-entities", RepairRule.UNESCAPED_ENTITY),
        ("@next/next/no-head-element", RepairRule.HEAD_ELEMENT),
    ])
    def test_by_rule_id(self, rule_id, expected):
        assert match_rule(_diag(message="whatever", rule_id=rule_id)) == expected

    def test_duplicate_react_by_message(self):
        assert match_rule(_diag(message="Duplicate identifier 'React'.")) == RepairRule.DUPLICATE_REACT_IMPORT

    def test_duplicate_export_by_message(self):
        d = _diag(message="Duplicate identifier 'default'. export default conflicts")
        assert match_rule(d) == RepairRule.DUPLICATE_DEFAULT_EXPORT

    def test_multiple_default_exports_message(self):
        d = _diag(message="A module cannot have multiple default exports.")
        assert match_rule(d) == RepairRule.DUPLICATE_DEFAULT_EXPORT

    def test_react_wins_over_export(self):
        d = _diag(message="Duplicate identifier 'React'. export")
        assert match_rule(d) == RepairRule.DUPLICATE_REACT_IMPORT

    def test_unknown_rule_returns_none(self):
        assert match_rule(_diag(message="Missing semicolon.", rule_id="semi")) is None

    def test_unknown_message_returns_none(self):
        assert match_rule(_diag(message="Cannot find name 'foo'.")) is None


# ===========================================================================
# 2. UNUSED_IMPORT
# ===========================================================================
class TestUnusedImport:

    def test_removes_trailing_name(self):
        content = "import React from 'react';\nimport { render, screen } from '@testing-library/react';\n"
        d = _diag(line=2, message="'screen' is defined but never used.")
        assert remove_unused_import(d, content) == (
            "import React from 'react';\nimport { render } from '@testing-library/react';\n"
        )

    def test_removes_leading_name_with_default_import(self):
        content = "import React, { useState, useEffect } from 'react';"
        d = _diag(line=1, message="'useState' is defined but never used.")
        assert remove_unused_import(d, content) == "import React, { useEffect } from 'react';"

    def test_only_named_import_keeps_default(self):
        content = "import React, { useState } from 'react';"
        d = _diag(line=1, message="'useState' is defined but never used.")
        assert remove_unused_import(d, content) == "import React from 'react';"

    def test_sole_import_blanks_line_and_keeps_line_count(self):
        content = "import { screen } from '@testing-library/react';\nconst a = 1;"
        d = _diag(line=1, message="'screen' is defined but never used.")
        fixed = remove_unused_import(d, content)
        assert fixed == "\nconst a = 1;"
        assert fixed.count("\n") == content.count("\n")

    def test_aliased_specifier(self):
        content = "import { useState as useLocal, useMemo } from 'react';"
        d = _diag(line=1, message="'useLocal' is defined but never used.")
        assert remove_unused_import(d, content) == "import { useMemo } from 'react';"

    def test_non_import_line_untouched(self):
        content = "const screen = getScreen();"
        d = _diag(line=1, message="'screen' is assigned a value but never used.")
        assert remove_unused_import(d, content) == content

    def test_name_not_on_line_untouched(self):
        content = "import { render } from '@testing-library/react';"
        d = _diag(line=1, message="'screen' is defined but never used.")
        assert remove_unused_import(d, content) == content

    def test_line_out_of_range_untouched(self):
        content = "import { a } from 'b';"
        d = _diag(line=42, message="'a' is defined but never used.")
        assert remove_unused_import(d, content) == content


# ===========================================================================
# 3. EXPLICIT_ANY
# ===========================================================================
class TestExplicitAny:

    def test_annotation(self):
        content = "const x = 1;\nfunction f(data: any, rows: any[]) {"
        d = _diag(line=2, message="Unexpected any.", rule_id="@typescript-eslint/no-explicit-any")
        assert narrow_explicit_any(d, content) == "const x = 1;\nfunction f(data: unknown, rows: unknown[]) {"

    def test_cast_and_generic(self):
        content = "const v = useState<any>(null) as any;"
        d = _diag(line=1, message="Unexpected any.")
        assert narrow_explicit_any(d, content) == "const v = useState<unknown>(null) as unknown;"

    def test_identifier_containing_any_untouched(self):
        content = "const company: string = anyone;"
        d = _diag(line=1, message="Unexpected any.")
        assert narrow_explicit_any(d, content) == content

    def test_other_lines_untouched(self):
        content = "let a: any;\nlet b: any;"
        d = _diag(line=2, message="Unexpected any.")
        assert narrow_explicit_any(d, content) == "let a: any;\nlet b: unknown;"


# ===========================================================================
# 4. UNESCAPED_ENTITY
# ===========================================================================
class TestUnescapedEntity:

    def test_single_quote_in_text(self):
        content = '      <p className="note">Don\'t forget</p>'
        d = _diag(line=1, message="`'` can be escaped with `&apos;`, `&lsquo;`, `&#39;`, `&rsquo;`.")
        assert escape_jsx_entities(d, content) == '      <p className="note">Don&apos;t forget</p>'

    def test_double_quote_in_text_keeps_attribute(self):
        content = '<span title="x">Say "hi"</span>'
        d = _diag(line=1, message='`"` can be escaped with `&quot;`, `&ldquo;`, `&#34;`, `&rdquo;`.')
        assert escape_jsx_entities(d, content) == '<span title="x">Say &quot;hi&quot;</span>'

    def test_expression_left_alone(self):
        content = "<p>{user.name + \"'s\"} it's</p>"
        d = _diag(line=1, message="`'` can be escaped with `&apos;`.")
        assert escape_jsx_entities(d, content) == "<p>{user.name + \"'s\"} it&apos;s</p>"

    def test_unknown_quote_escapes_both(self):
        content = "  He said \"it's\""
        d = _diag(line=1, message="Unescaped entity.")
        assert escape_jsx_entities(d, content) == "  He said &quot;it&apos;s&quot;"


# ===========================================================================
# 5. HEAD_ELEMENT
# ===========================================================================
class TestHeadElement:

    def test_adds_import_after_react_and_rewrites_tags(self):
        content = (
            "import React from 'react';\n"
            "import Link from 'next/link';\n"
            "export default function Page() {\n"
            "  return (<html><head><title>T</title></head><body/></html>);\n"
            "}"
        )
        d = _diag(line=4, message="Do not use `<head>` element.")
        fixed = use_head_component(d, content)
        lines = fixed.split("\n")
        assert lines[1] == "import Head from 'next/head';"
        assert "<Head><title>T</title></Head>" in fixed
        assert "<head>" not in fixed

    def test_import_not_duplicated(self):
        content = "import Head from 'next/head';\nconst x = <head lang=\"en\"></head>;"
        d = _diag(line=2, message="Do not use `<head>` element.")
        fixed = use_head_component(d, content)
        assert fixed.count("import Head from 'next/head'") == 1
        assert '<Head lang="en"></Head>' in fixed

    def test_header_tag_untouched(self):
        content = "import React from 'react';\nconst x = <header><head></head></header>;"
        fixed = use_head_component(_diag(line=2), content)
        assert "<header>" in fixed and "</header>" in fixed
        assert "<Head></Head>" in fixed

    def test_no_react_import_goes_after_last_import(self):
        content = "import a from 'a';\nimport b from 'b';\nconst x = <head></head>;"
        fixed = use_head_component(_diag(line=3), content)
        assert fixed.split("\n")[2] == "import Head from 'next/head';"

    def test_no_imports_goes_first(self):
        fixed = use_head_component(_diag(line=1), "const x = <head></head>;")
        assert fixed.split("\n")[0] == "import Head from 'next/head';"


# ===========================================================================
# 6. DUPLICATE_REACT_IMPORT
# ===========================================================================
class TestDuplicateReactImport:

    def test_merges_named_imports_in_first_seen_order(self):
        content = (
            "import React, { useState } from 'react';\n"
            "import styles from './a.module.css';\n"
            "import React, { useEffect, useState } from 'react';\n"
            "export default function A() { return null; }"
        )
        fixed = merge_react_imports(_diag(message="Duplicate identifier 'React'."), content)
        assert fixed == (
            "import React, { useState, useEffect } from 'react';\n"
            "import styles from './a.module.css';\n"
            "export default function A() { return null; }"
        )

    def test_plain_default_imports(self):
        content = "import React from 'react';\nimport React from 'react';\nconst a = 1;"
        fixed = merge_react_imports(_diag(message="Duplicate identifier 'React'."), content)
        assert fixed == "import React from 'react';\nconst a = 1;"

    def test_single_import_untouched(self):
        content = "import React from 'react';\nconst a = 1;"
        assert merge_react_imports(_diag(), content) == content


# ===========================================================================
# 7. DUPLICATE_DEFAULT_EXPORT
# ===========================================================================
class TestDuplicateDefaultExport:

    def test_keeps_last(self):
        content = (
            "function A() {}\n"
            "export default A;\n"
            "function B() {}\n"
            "export default B;"
        )
        fixed = drop_duplicate_default_exports(_diag(), content)
        assert fixed == "function A() {}\nfunction B() {}\nexport default B;"

    def test_single_export_untouched(self):
        content = "export default function A() {}"
        assert drop_duplicate_default_exports(_diag(), content) == content


# ===========================================================================
# 8. apply_rule
# ===========================================================================
def test_apply_rule_dispatches():
    content = "let a: any;"
    d = _diag(line=1, message="Unexpected any.", rule_id="@typescript-eslint/no-explicit-any")
    assert apply_rule(match_rule(d), d, content) == "let a: unknown;"


def test_apply_rule_no_change_returns_same_content():
    content = "let a: string;"
    d = _diag(line=1, message="Unexpected any.", rule_id="@typescript-eslint/no-explicit-any")
    assert apply_rule(RepairRule.EXPLICIT_ANY, d, content) == content

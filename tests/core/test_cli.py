# tests/core/test_cli.py
import io
import json

import pytest

from spiracss import cli

PAGE_HTML = '<section class="page-layout"><div class="hero-banner"><h2 class="title"></h2></div></section>'


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Runs each CLI call from an empty directory without touching global logging."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "configure_logger", lambda *args, **kwargs: None)
    return tmp_path


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


def test_help_without_arguments(workdir, capsys):
    assert cli.main([]) == 0
    assert "spiracss lint" in capsys.readouterr().out


# --- lint ---

def test_lint_clean_file(workdir, capsys):
    page = write(workdir / "page.html", PAGE_HTML)
    assert cli.main(["lint", str(page)]) == 0
    assert capsys.readouterr().out.strip() == "No SpiraCSS HTML structure errors."


def test_lint_reports_issues(workdir, capsys):
    page = write(workdir / "page.html", '<div class="title">text</div>')
    assert cli.main(["lint", str(page)]) == 1
    err = capsys.readouterr().err
    assert 'ERROR [ROOT_NOT_BLOCK] at title: Root element base class "title" must be a Block.' in err


def test_lint_json_report(workdir, capsys):
    page = write(workdir / "page.html", '<div class="alpha-box"></div><div class="beta-box"></div>')
    assert cli.main(["lint", "--json", str(page)]) == 1
    report = json.loads(capsys.readouterr().out)
    assert report["mode"] == "root"
    assert report["ok"] is False
    assert report["errors"][0]["code"] == "MULTIPLE_ROOT_ELEMENTS"
    assert report["errors"][0]["path"] == []


def test_lint_selection_mode_from_stdin(workdir, capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO('<div class="alpha-box"></div><div class="beta-box"></div>'))
    assert cli.main(["lint", "--selection", "--stdin", "--json"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report == {"file": None, "mode": "selection", "ok": True, "errors": []}


def test_lint_multiple_files(workdir, capsys):
    good = write(workdir / "good.html", PAGE_HTML)
    bad = write(workdir / "bad.html", '<div class="hero-banner -large"></div>')
    assert cli.main(["lint", "--json", str(good), str(bad)]) == 1
    reports = json.loads(capsys.readouterr().out)
    assert [report["ok"] for report in reports] == [True, False]


def test_lint_missing_input(workdir, capsys):
    assert cli.main(["lint"]) == 1
    assert "No input specified" in capsys.readouterr().err


# --- generate ---

def test_generate_writes_files(workdir):
    page = write(workdir / "page.html", PAGE_HTML)
    assert cli.main(["generate", str(page)]) == 0
    assert (workdir / "page-layout.scss").read_text(encoding="utf-8").startswith('@use "@styles/partials/global"')
    assert (workdir / "scss" / "hero-banner.scss").exists()
    assert (workdir / "scss" / "index.scss").read_text(encoding="utf-8") == '@use "hero-banner";\n'


def test_generate_merges_existing_index(workdir):
    page = write(workdir / "page.html", PAGE_HTML)
    (workdir / "scss").mkdir()
    write(workdir / "scss" / "index.scss", '@use "old-block";\n// keep me?\n@use "hero-banner";\n')
    assert cli.main(["generate", str(page)]) == 0
    assert (workdir / "scss" / "index.scss").read_text(encoding="utf-8") == (
        '@use "old-block";\n@use "hero-banner";\n'
    )


def test_generate_into_base_dir(workdir):
    page = write(workdir / "page.html", PAGE_HTML)
    out = workdir / "out"
    assert cli.main(["generate", "--base-dir", str(out), str(page)]) == 0
    assert (out / "page-layout.scss").exists()
    assert (out / "scss" / "index.scss").exists()


def test_generate_dry_run_writes_nothing(workdir, capsys):
    page = write(workdir / "page.html", PAGE_HTML)
    assert cli.main(["generate", "--dry-run", str(page)]) == 0
    out = capsys.readouterr().out
    assert "page-layout.scss" in out
    assert "hero-banner.scss" in out
    assert not (workdir / "page-layout.scss").exists()


def test_generate_json(workdir, capsys):
    page = write(workdir / "page.html", PAGE_HTML)
    assert cli.main(["generate", "--json", str(page)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["mode"] == "root"
    assert [file["path"] for file in payload["files"]] == [
        "page-layout.scss", "scss/hero-banner.scss", "scss/index.scss",
    ]


def test_generate_stops_on_structure_errors(workdir, capsys):
    page = write(workdir / "page.html", '<div class="hero-banner"><div class="body"><div class="media-card"></div></div></div>')
    assert cli.main(["generate", str(page)]) == 1
    assert "ERROR [ELEMENT_PARENT_OF_BLOCK]" in capsys.readouterr().err
    assert not (workdir / "hero-banner.scss").exists()


def test_generate_can_ignore_structure_errors(workdir, capsys):
    page = write(workdir / "page.html", '<div class="hero-banner"><div class="body"><div class="media-card"></div></div></div>')
    assert cli.main(["generate", "--ignore-structure-errors", str(page)]) == 0
    err = capsys.readouterr().err
    assert "WARN [ELEMENT_PARENT_OF_BLOCK] at hero-banner > body > media-card:" in err
    assert err.rstrip().endswith("(ignored)")
    assert (workdir / "hero-banner.scss").exists()


def test_generation_error_exits_with_one(workdir, capsys):
    page = write(workdir / "page.html", '<div class="alpha-box"></div><div class="beta-box"></div>')
    assert cli.main(["generate", "--ignore-structure-errors", str(page)]) == 1
    assert "Multiple root elements found" in capsys.readouterr().err


# --- format ---

def test_format_to_stdout(workdir, capsys):
    page = write(workdir / "page.html", "<div><p>x</p></div>")
    assert cli.main(["format", str(page)]) == 0
    assert capsys.readouterr().out == '<div class="block-box"><p class="element">x</p></div>'


def test_format_to_file_skips_unchanged_output(workdir, capsys):
    page = write(workdir / "page.html", "<div><p>x</p></div>")
    target = workdir / "formatted.html"
    assert cli.main(["format", str(page), "-o", str(target)]) == 0
    assert target.read_text(encoding="utf-8") == '<div class="block-box"><p class="element">x</p></div>'
    capsys.readouterr()

    assert cli.main(["format", str(page), "-o", str(target)]) == 0
    assert "No changes needed." in capsys.readouterr().err


def test_format_skips_templates(workdir, capsys):
    page = write(workdir / "page.html", "<div>{{ name }}</div>")
    target = workdir / "formatted.html"
    assert cli.main(["format", str(page), "-o", str(target)]) == 0
    assert "Template syntax" in capsys.readouterr().err
    assert not target.exists()


def test_format_missing_file(workdir, capsys):
    assert cli.main(["format", "nope.html"]) == 1
    assert "File not found: nope.html" in capsys.readouterr().err


def test_format_uses_class_name_from_config(workdir, capsys):
    write(workdir / "spiracss.config.json", json.dumps({"htmlFormat": {"classAttribute": "className"}}))
    page = write(workdir / "page.tsx", "<div><p>x</p></div>")
    assert cli.main(["format", str(page)]) == 0
    assert capsys.readouterr().out == '<div className="block-box"><p className="element">x</p></div>'


# --- configuration errors ---

def test_broken_config_exits_with_one(workdir, capsys):
    write(workdir / "spiracss.config.json", "{ not json")
    page = write(workdir / "page.html", PAGE_HTML)
    assert cli.main(["lint", str(page)]) == 1
    assert "Failed to load spiracss.config.json" in capsys.readouterr().err


def test_explicit_config_path(workdir, capsys):
    config = write(workdir / "custom.json", json.dumps({"selectorPolicy": {"variant": {"mode": "class"}}}))
    page = write(workdir / "page.html", '<div class="hero-banner -large"></div>')
    assert cli.main(["--config", str(config), "lint", str(page)]) == 0


def test_malformed_selector_policy_exits_with_one(workdir, capsys):
    write(workdir / "spiracss.config.json", json.dumps({"selectorPolicy": {"state": {"mode": "aria"}}}))
    page = write(workdir / "page.html", PAGE_HTML)
    assert cli.main(["lint", str(page)]) == 1
    assert 'selectorPolicy.state.mode must be "data" or "class".' in capsys.readouterr().err

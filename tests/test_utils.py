from blogship import utils


def test_slugify_strips_date_prefix():
    assert utils.slugify("Throttling in Go") == "throttling-in-go"
    assert utils.slugify("2022-10-07-throttling-in-go") == "throttling-in-go"
    assert utils.slugify("!!!") == "untitled"


def test_is_markdown(tmp_path):
    assert utils.is_markdown(tmp_path / "post.md")
    assert utils.is_markdown(tmp_path / "POST.MD")
    assert not utils.is_markdown(tmp_path / "post.html")


def test_find_executable(monkeypatch, tmp_path):
    monkeypatch.setattr(utils.shutil, "which", lambda name: None)
    assert utils.find_executable("hugo") is None

    local = tmp_path / "hugo"
    local.write_text("", encoding="utf-8")
    assert utils.find_executable(str(local)) == str(local)

    monkeypatch.setattr(utils.shutil, "which", lambda name: "/usr/bin/hugo")
    assert utils.find_executable("hugo") == "/usr/bin/hugo"


def test_clean_worktree_keeps_git_dir(tmp_path):
    (tmp_path / ".git" / "objects").mkdir(parents=True)
    (tmp_path / ".git" / "HEAD").write_text("ref", encoding="utf-8")
    (tmp_path / "old-post").mkdir()
    (tmp_path / "old-post" / "index.html").write_text("x", encoding="utf-8")
    (tmp_path / ".nojekyll").write_text("", encoding="utf-8")
    (tmp_path / "CNAME").write_text("old.example.com", encoding="utf-8")

    removed = utils.clean_worktree(tmp_path)

    assert removed == [".nojekyll", "CNAME", "old-post"]
    assert [p.name for p in tmp_path.iterdir()] == [".git"]
    assert (tmp_path / ".git" / "HEAD").exists()


def test_ensure_absent(tmp_path):
    directory = tmp_path / "public"
    (directory / "nested").mkdir(parents=True)
    utils.ensure_absent(directory)
    assert not directory.exists()

    single = tmp_path / "file.txt"
    single.write_text("x", encoding="utf-8")
    utils.ensure_absent(single)
    assert not single.exists()

    utils.ensure_absent(tmp_path / "missing")


def test_tree_digest_tracks_paths_and_bytes(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    for root in (a, b):
        (root / "posts").mkdir(parents=True)
        (root / "posts" / "index.html").write_text("<h1>Hi</h1>", encoding="utf-8")
    (a / ".git").mkdir()
    (a / ".git" / "HEAD").write_text("ignored", encoding="utf-8")
    assert utils.tree_digest(a) == utils.tree_digest(b)

    (b / "posts" / "index.html").write_text("<h1>Hi!</h1>", encoding="utf-8")
    assert utils.tree_digest(a) != utils.tree_digest(b)

    (b / "posts" / "index.html").write_text("<h1>Hi</h1>", encoding="utf-8")
    (b / "posts" / "index.html").rename(b / "posts" / "other.html")
    assert utils.tree_digest(a) != utils.tree_digest(b)

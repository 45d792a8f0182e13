import httpx

from postlint.services import checker

from conftest import make_post


def ok_client():
    return httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))


def test_check_content_reports_every_file(content_dir):
    make_post(content_dir, "good.md")
    (content_dir / "bad.md").write_text("---\ntitle: [\n---\nbody\n", encoding="utf-8")

    reports = checker.check_content(content_dir, check_links=False)

    by_name = {report.path.name: report for report in reports}
    assert set(by_name) == {"bad.md", "good.md"}
    assert by_name["good.md"].ok
    assert by_name["good.md"].slug == "good"
    assert not by_name["bad.md"].ok
    assert by_name["bad.md"].slug is None


def test_broken_links_fail_the_report(content_dir):
    make_post(content_dir, "linked.md", body="Read [this](https://example.com) and [that](gone.md).")

    with ok_client() as client:
        (report,) = checker.check_content(content_dir, client=client)

    assert [result.link.url for result in report.broken_links] == ["gone.md"]
    assert not report.ok
    assert report.to_dict()["ok"] is False


def test_drafts_can_be_skipped(content_dir):
    make_post(content_dir, "draft.md", draft="true")
    make_post(content_dir, "live.md")

    reports = checker.check_content(content_dir, check_links=False, include_drafts=False)

    assert [report.slug for report in reports] == ["live"]


def test_empty_directory_yields_no_reports(tmp_path):
    assert checker.check_content(tmp_path / "nothing", check_links=False) == []


def test_external_url_shared_by_posts_is_fetched_once(content_dir):
    make_post(content_dir, "one.md", body="See [a](https://example.com/a).")
    make_post(content_dir, "two.md", body="Also [a](https://example.com/a).")
    requested = []

    def handler(request):
        requested.append(str(request.url))
        return httpx.Response(200)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        reports = checker.check_content(content_dir, client=client)

    assert requested == ["https://example.com/a"]
    assert [len(report.links) for report in reports] == [1, 1]
    assert all(report.ok for report in reports)

import os

from PIL import Image
from pypdf import PdfReader

from portal.client.detail import PostDetailController
from portal.client.models import Post
from portal.client.pdf_export import export_post, paginate, sanitize_filename


def _post(paragraphs: int) -> Post:
    body = "\n\n".join(f"## Part {i}\nCoroutines **yield** control back to the loop. " * 3 for i in range(paragraphs))
    return Post.model_validate(
        {
            "_id": "p1",
            "title": "Async IO: a tour!",
            "content": body,
            "author": {"_id": "u1", "name": "Ada"},
            "summary": {"status": "ready", "tldr": "Loops run coroutines.", "keyTakeaways": ["await yields"]},
        }
    )


def test_sanitize_filename():
    assert sanitize_filename("Async IO: a tour!") == "async_io__a_tour_.pdf"
    assert sanitize_filename("") == "post.pdf"


def test_paginate_slices_exact_pages():
    page_height = round(100 * 297 / 210)

    assert len(paginate(Image.new("RGB", (100, page_height), "white"))) == 1
    pages = paginate(Image.new("RGB", (100, page_height + 1), "white"))
    assert len(pages) == 2
    assert pages[1].size == (100, page_height)


def test_export_writes_multi_page_pdf(tmp_path):
    path = export_post(_post(paragraphs=40), str(tmp_path))

    assert os.path.basename(path) == "async_io__a_tour_.pdf"
    assert len(PdfReader(path).pages) > 1


def test_export_from_detail_controller(tmp_path, fake_server, session, ui, api_for):
    controller = PostDetailController("p1", session, api_for(session), ui)
    controller.post = _post(paragraphs=1)

    path = controller.export_to_pdf(str(tmp_path / "exports"))

    assert len(PdfReader(path).pages) == 1
    assert controller.is_pdf_generating is False

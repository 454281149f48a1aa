from esghub.viewer.frame import PdfFrame

PAGES = ["Company overview and strategy", "Net Zero by 2030 is our goal", "Water use fell. NET ZERO by 2030 again"]


def test_capabilities_follow_host_setup():
    bare = PdfFrame("r.pdf", data=b"%PDF")
    assert bare.find_controller is None and bare.find is None and bare.run_script is None
    full = PdfFrame("r.pdf", file_url="http://store/r.pdf", pages=PAGES,
                    viewer_url="http://viewer/web/viewer.html", allow_scripts=True)
    assert full.find_controller is not None and full.find is not None and full.run_script is not None


def test_find_moves_to_matching_page_case_insensitively():
    frame = PdfFrame("r.pdf", data=b"%PDF", pages=PAGES)
    assert frame.find("net zero by 2030", False, False, True, False, True) is True
    assert frame.page == 2
    assert frame.highlight == "net zero by 2030"


def test_find_wraps_around_from_current_page():
    frame = PdfFrame("r.pdf", data=b"%PDF", pages=PAGES)
    frame.page = 3
    assert frame.find("Company overview") is True
    assert frame.page == 1


def test_find_without_wrap_stops_at_last_page():
    frame = PdfFrame("r.pdf", data=b"%PDF", pages=PAGES)
    frame.page = 3
    assert frame.find("Company overview", wrap_around=False) is False
    assert frame.page == 3


def test_find_backwards_and_case_sensitive():
    frame = PdfFrame("r.pdf", data=b"%PDF", pages=PAGES)
    frame.page = 1
    assert frame.find("NET ZERO", case_sensitive=True, backwards=True) is True
    assert frame.page == 3


def test_find_whole_word():
    frame = PdfFrame("r.pdf", data=b"%PDF", pages=["Watershed report"])
    assert frame.find("Water", whole_word=True) is False
    assert frame.find("Water") is True


def test_find_controller_records_state_and_scrolls():
    frame = PdfFrame("r.pdf", file_url="http://store/uploads/r.pdf", pages=PAGES,
                     viewer_url="http://viewer/web/viewer.html")
    frame.find_controller.execute_command("find", {"query": "Net Zero by 2030", "phraseSearch": True,
                                                   "highlightAll": True, "findPrevious": False})
    assert frame.page == 2
    state = frame.find_controller.state
    assert state.highlight_all and state.phrase_search
    src = frame.src()
    assert src.startswith("http://viewer/web/viewer.html?file=http%3A%2F%2Fstore%2Fuploads%2Fr.pdf#page=2")
    assert "search=Net%20Zero%20by%202030&phrase=true" in src


def test_src_falls_back_to_data_uri():
    frame = PdfFrame("r.pdf", data=b"%PDF-1.4")
    assert frame.src().startswith("data:application/pdf;base64,")
    assert frame.src().endswith("#page=1")


def test_ready_once_content_present():
    assert PdfFrame("r.pdf").is_ready() is False
    assert PdfFrame("r.pdf", file_url="http://store/r.pdf").is_ready() is True


def test_text_find_hit_is_carried_in_src():
    frame = PdfFrame("r.pdf", file_url="http://store/uploads/r.pdf", pages=["intro", "Our pledge Net Zero by 2030"])
    assert frame.find("Net Zero by 2030") is True
    assert frame.src() == "http://store/uploads/r.pdf#page=2&search=Net%20Zero%20by%202030"


def test_text_find_hit_on_inline_data():
    frame = PdfFrame("r.pdf", data=b"%PDF-1.4", pages=PAGES)
    frame.find("net zero")
    assert frame.src().endswith("#page=2&search=net%20zero")


def test_scripts_are_queued_for_the_next_draw():
    frame = PdfFrame("r.pdf", data=b"%PDF", allow_scripts=True)
    frame.run_script("window.find('x')")
    assert frame.take_scripts() == ["window.find('x')"]
    assert frame.take_scripts() == []

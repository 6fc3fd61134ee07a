from server.page import echo_url, js_string, render_home


def test_page_points_at_request_host():
    page = render_home("localhost:8080")
    assert 'new WebSocket("ws://localhost:8080/echo");' in page
    assert '<button id="open">Open</button>' in page
    assert '<button id="send">Send</button>' in page
    assert '<button id="close">Close</button>' in page


def test_custom_echo_path():
    assert echo_url("example.test", "/ws") == "ws://example.test/ws"
    assert 'new WebSocket("ws://example.test/ws");' in render_home("example.test", "/ws")


def test_hostile_host_cannot_break_out_of_script():
    page = render_home('evil"></script><script>alert(1)//')
    assert "</script><script>alert(1)" not in page
    assert '\\"' in page


def test_js_string_escapes_markup():
    assert js_string("a<b>&c") == '"a\\u003cb\\u003e\\u0026c"'

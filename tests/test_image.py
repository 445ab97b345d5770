from api._shared import IMMUTABLE_CACHE_CONTROL, Config
from api.image import ImageHandler, handler, render_card, truncate_text

from tests.conftest import FakeReader


def test_image_success(config, reader):
    body, status, headers = ImageHandler(config, reader)('7')

    assert status == 200
    assert headers['Content-Type'] == 'image/svg+xml'
    assert headers['Cache-Control'] == IMMUTABLE_CACHE_CONTROL
    assert '"Will it rain?"' in body
    assert '"Yes"' in body
    assert '#7' in body
    assert 'MAGIC BASE BALL' in body
    assert 'YOU ASKED' in body
    assert 'THE ORACLE SAYS' in body
    assert 'width="800" height="1200"' in body
    assert reader.calls == [('get_prophecy', 7)]


def test_image_invalid_id_is_plain_text(config, reader):
    for token_id in ('abc', '', None):
        body, status, headers = ImageHandler(config, reader)(token_id)
        assert status == 400
        assert body == 'Invalid token ID'
        assert headers['Content-Type'].startswith('text/plain')
    assert reader.calls == []


def test_image_truncates_long_text(config):
    question = 'q' * 150
    answer = 'a' * 100
    reader = FakeReader(prophecies={3: (question, answer, 1)})
    body, status, _ = ImageHandler(config, reader)('3')

    assert status == 200
    assert '"' + 'q' * 117 + '..."' in body
    assert '"' + 'a' * 77 + '..."' in body
    assert question not in body
    assert answer not in body


def test_image_keeps_text_at_limit(config):
    question = 'q' * 120
    answer = 'a' * 80
    reader = FakeReader(prophecies={3: (question, answer, 1)})
    body, _, _ = ImageHandler(config, reader)('3')

    assert '"' + question + '"' in body
    assert '"' + answer + '"' in body


def test_image_not_found_falls_back(config):
    reader = FakeReader()
    body, status, headers = ImageHandler(config, reader)('99')

    assert status == 200
    assert headers['Content-Type'] == 'image/svg+xml'
    assert 'Cache-Control' not in headers
    assert 'Error loading token #99' in body
    assert 'Token may not exist or contract error' in body


def test_image_transport_error_falls_back(config, transport_error):
    reader = FakeReader(prophecy_error=transport_error)
    body, status, headers = ImageHandler(config, reader)('7')

    assert status == 200
    assert 'Error loading token #7' in body
    assert 'Cache-Control' not in headers


def test_image_unconfigured_contract_falls_back():
    body, status, _ = ImageHandler(Config())('4')

    assert status == 200
    assert 'Error loading token #4' in body


def test_image_does_not_check_owner(config):
    reader = FakeReader(prophecies={8: ('Q', 'A', 1)})
    _, status, _ = ImageHandler(config, reader)('8')

    assert status == 200
    assert reader.calls == [('get_prophecy', 8)]


def test_render_card_escapes_markup():
    svg = render_card('Is 1 < 2 & 3 > 2?', '<b>Yes</b>', '1')
    assert 'Is 1 &lt; 2 &amp; 3 &gt; 2?' in svg
    assert '<b>' not in svg


def test_truncate_text():
    assert truncate_text('short', 10) == 'short'
    assert truncate_text('abcdefghijk', 10) == 'abcdefg...'
    assert len(truncate_text('x' * 500, 120)) == 120


def test_module_handler_rejects_bad_query_id():
    class Req:
        method = 'GET'
        view_args = None
        args = {'tokenId': 'abc'}

    body, status, _ = handler(Req())
    assert status == 400
    assert body == 'Invalid token ID'


def test_truncate_counts_code_points():
    text = '\U0001f52e' * 121

    assert truncate_text('\U0001f52e' * 120, 120) == '\U0001f52e' * 120
    assert truncate_text(text, 120) == '\U0001f52e' * 117 + '...'

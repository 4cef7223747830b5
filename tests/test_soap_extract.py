"""Tests for scoped field and block extraction."""

from paratransit.soap.extract import (
    extract_all_blocks,
    extract_all_fields,
    extract_block,
    extract_field,
    has_element,
    parse_attributes,
)


# ── extract_field ───────────────────────────────────────────────────


class TestExtractField:
    def test_attributes_tolerated(self):
        assert extract_field('<Foo attr="x">bar</Foo>', "Foo") == "bar"

    def test_absent_tag_is_empty(self):
        assert extract_field("<Other>1</Other>", "Foo") == ""

    def test_empty_input(self):
        assert extract_field("", "Foo") == ""
        assert extract_field(None, "Foo") == ""

    def test_exact_tag_name(self):
        xml = "<FooBar>wrong</FooBar><Foo>right</Foo>"
        assert extract_field(xml, "Foo") == "right"

    def test_first_match_wins(self):
        assert extract_field("<A>1</A><A>2</A>", "A") == "1"

    def test_text_is_stripped_and_unescaped(self):
        assert extract_field("<Name>  Smith &amp; Sons </Name>", "Name") == "Smith & Sons"

    def test_self_closing_is_not_a_match(self):
        assert extract_field("<Foo/><Foo>x</Foo>", "Foo") == "x"

    def test_malformed_does_not_raise(self):
        assert extract_field("<Foo>unterminated", "Foo") == ""


class TestExtractAllFields:
    def test_document_order(self):
        xml = '<Date>20260113</Date><x/><Date kind="b">20260114</Date>'
        assert extract_all_fields(xml, "Date") == ["20260113", "20260114"]

    def test_none_found(self):
        assert extract_all_fields("<A>1</A>", "Date") == []


# ── Blocks ─────────────────────────────────────────────────────────


class TestBlocks:
    def test_inner_xml_with_nested_tags(self):
        assert extract_block("<Person><Name>Jo</Name></Person>", "Person") == "<Name>Jo</Name>"

    def test_block_spans_lines(self):
        xml = "<Leg>\n  <A>1</A>\n  <B>2</B>\n</Leg>"
        assert extract_block(xml, "Leg") == "<A>1</A>\n  <B>2</B>"

    def test_block_does_not_match_longer_tag(self):
        xml = "<PassBookingPassenger><T>CLI</T></PassBookingPassenger>"
        assert extract_block(xml, "PassBooking") == ""

    def test_all_blocks(self):
        xml = "<S><Id>1</Id></S><S id='2'><Id>2</Id></S>"
        assert extract_all_blocks(xml, "S") == ["<Id>1</Id>", "<Id>2</Id>"]

    def test_blocks_can_be_searched_again(self):
        xml = "<B><L><Status>Performed</Status></L></B>"
        assert extract_field(extract_block(extract_block(xml, "B"), "L"), "Status") == "Performed"

    def test_absent(self):
        assert extract_block("", "X") == ""
        assert extract_all_blocks("<Y></Y>", "X") == []

    def test_block_tag_ignores_case(self):
        xml = "<PASSBOOKING><BookingId>7</BookingId></PASSBOOKING><passbooking><BookingId>8</BookingId></passbooking>"
        assert extract_block(xml, "PassBooking") == "<BookingId>7</BookingId>"
        assert len(extract_all_blocks(xml, "PassBooking")) == 2

    def test_field_tag_is_case_sensitive(self):
        assert extract_field("<BOOKINGID>7</BOOKINGID>", "BookingId") == ""


# ── Element presence and attributes ─────────────────────────────────


class TestElementHelpers:
    def test_has_element(self):
        assert has_element("<BookingId>1</BookingId>", "BookingId")
        assert has_element("<Error/>", "Error")
        assert not has_element("<ErrorMessage>x</ErrorMessage>", "Error")
        assert not has_element("", "Error")

    def test_parse_attributes(self):
        xml = '<Solution id="7" kind="fast &amp; cheap">x</Solution>'
        assert parse_attributes(xml, "Solution") == {"id": "7", "kind": "fast & cheap"}

    def test_parse_attributes_none(self):
        assert parse_attributes("<Solution>x</Solution>", "Solution") == {}
        assert parse_attributes("", "Solution") == {}

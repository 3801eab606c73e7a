"""
Tests for the segmentation state machine, driven with synthetic events.
"""
import pytest

from core.errors import KjvMilestoneError, KjvParseError
from data.schemas import DiagnosticKind, WordFlag, WordOrigin
from osis.reader import CloseTag, OpenTag, Text
from osis.references import GREEK_DEFAULT
from osis.segmentation import ParseMode, SegmentationMachine, parse_verse_ref


def start_verse(osis_id, sid=None):
    attributes = {"osisID": osis_id}
    if sid:
        attributes["sID"] = sid
    return [OpenTag("verse", attributes), CloseTag("verse", attributes)]


def end_verse(eid):
    attributes = {"eID": eid}
    return [OpenTag("verse", attributes), CloseTag("verse", attributes)]


def word(text, **attributes):
    return [OpenTag("w", attributes), Text(text), CloseTag("w", attributes)]


def insertion(text):
    attributes = {"type": "added"}
    return [OpenTag("transChange", attributes), Text(text), CloseTag("transChange", attributes)]


def note(text):
    return [OpenTag("note", {}), Text(text), CloseTag("note", {})]


def run(events, machine=None):
    machine = machine or SegmentationMachine()
    for event in events:
        machine.feed(event)
    return machine.finish()


def milestone_verse(osis_id, body):
    sid = f"{osis_id}.seID.1"
    return start_verse(osis_id, sid) + body + end_verse(sid)


class TestModes:
    """Tests for mode transitions."""

    def test_initial_mode(self):
        assert SegmentationMachine().state.mode == ParseMode.OUTSIDE_VERSE

    def test_verse_mode(self):
        machine = SegmentationMachine()
        for event in start_verse("Gen.1.1", "s1"):
            machine.feed(event)
        assert machine.state.mode == ParseMode.INSIDE_VERSE_BODY

    def test_colophon_mode(self):
        machine = SegmentationMachine()
        machine.feed(OpenTag("div", {"type": "colophon", "osisID": "Rom.c"}))
        assert machine.state.mode == ParseMode.INSIDE_COLOPHON
        machine.feed(CloseTag("div", {"type": "colophon", "osisID": "Rom.c"}))
        assert machine.state.mode == ParseMode.OUTSIDE_VERSE

    def test_feed_after_finish(self):
        machine = SegmentationMachine()
        machine.finish()
        with pytest.raises(RuntimeError):
            machine.feed(Text("x"))


class TestVerseBoundaries:
    """Tests for verse start and end markers."""

    def test_milestone_verse(self):
        result = run(milestone_verse("Gen.1.1", word("God", lemma="strong:H0430")))
        assert len(result.verses) == 1
        verse = result.verses[0]
        assert (verse.book, verse.chapter, verse.number) == ("Gen", 1, 1)
        assert verse.text == "God"

    def test_container_verse(self):
        attributes = {"osisID": "John.11.35"}
        events = [OpenTag("verse", attributes)] + word("Jesus") + word("wept") + [Text(".")]
        events.append(CloseTag("verse", attributes))
        result = run(events)
        assert result.verses[0].text == "Jesus wept."
        assert [w.position for w in result.verses[0].words] == [1, 2]

    def test_start_milestone_close_does_not_end_verse(self):
        machine = SegmentationMachine()
        for event in start_verse("Gen.1.1", "s1"):
            machine.feed(event)
        assert machine.state.verse is not None

    def test_positions_restart_per_verse(self):
        events = milestone_verse("Gen.1.1", word("In the")) + milestone_verse("Gen.1.2", word("And"))
        result = run(events)
        assert [w.position for w in result.verses[1].words] == [1]

    def test_nested_start_ignored(self):
        events = start_verse("Gen.1.1", "s1") + word("In") + start_verse("Gen.1.2", "s2")
        events += word("the") + end_verse("s1")
        result = run(events)
        assert [v.verse_id for v in result.verses] == ["Gen.1.1"]
        assert result.verses[0].text == "In the"
        assert len(result.diagnostics_of(DiagnosticKind.NESTED_VERSE_START)) == 1

    def test_orphan_end_ignored(self):
        result = run(end_verse("Gen.1.1.seID.1"))
        assert result.verses == []
        assert len(result.diagnostics_of(DiagnosticKind.ORPHAN_VERSE_END)) == 1

    def test_mismatched_end_is_fatal(self):
        events = start_verse("Gen.1.1", "s1") + end_verse("s2")
        with pytest.raises(KjvMilestoneError) as exc_info:
            run(events)
        assert exc_info.value.start_id == "s1"
        assert exc_info.value.end_id == "s2"

    def test_unterminated_verse_is_fatal(self):
        with pytest.raises(KjvMilestoneError):
            run(start_verse("Gen.1.1", "s1") + word("In"))

    def test_malformed_osis_id_is_fatal(self):
        with pytest.raises(KjvParseError):
            run(start_verse("Gen.one.1", "s1"))

    def test_verse_without_osis_id_ignored(self):
        result = run([OpenTag("verse", {"n": "1"}), CloseTag("verse", {"n": "1"})])
        assert result.verses == []
        assert result.diagnostics == []

    def test_empty_verse_kept(self):
        result = run(milestone_verse("Gen.1.1", []))
        assert result.verses[0].words == ()
        assert result.verses[0].text == ""


class TestWords:
    """Tests for word, insertion and tail text handling."""

    def test_word_tag_splits_tokens(self):
        events = milestone_verse("Gen.1.1", word("In the beginning", lemma="strong:H07225", morph="strongMorph:TH8804"))
        words = run(events).verses[0].words
        assert [w.text for w in words] == ["In", "the", "beginning"]
        assert all(w.strongs == ("H7225",) for w in words)
        assert all(w.lemma == "strong:H07225" for w in words)
        assert all(w.morph == "strongMorph:TH8804" for w in words)
        assert all(w.origin == WordOrigin.WORD_TAG for w in words)

    def test_extra_attributes(self):
        events = milestone_verse("Gen.1.1", word("God", lemma="strong:H0430", src="3"))
        assert dict(run(events).verses[0].words[0].attributes) == {"src": "3"}

    def test_policy_applied(self):
        events = milestone_verse("Matt.1.1", word("book", lemma="strong:976"))
        result = run(events, SegmentationMachine(GREEK_DEFAULT))
        assert result.verses[0].words[0].strongs == ("G976",)

    def test_alternate_markers_removed(self):
        events = milestone_verse("Gen.1.1", word("the/ heaven"))
        assert [w.text for w in run(events).verses[0].words] == ["the", "heaven"]

    def test_translator_insertion(self):
        events = milestone_verse("Gen.1.2", word("void") + insertion("was"))
        words = run(events).verses[0].words
        inserted = words[1]
        assert inserted.text == "was"
        assert inserted.position == 2
        assert inserted.is_translator_insertion
        assert inserted.strongs == ()
        assert dict(inserted.attributes) == {"type": "added"}
        assert inserted.origin == WordOrigin.TRANSLATOR_INSERTION

    def test_insertion_multiple_tokens(self):
        events = milestone_verse("Rom.16.25", insertion("and sent"))
        words = run(events).verses[0].words
        assert [w.text for w in words] == ["and", "sent"]
        assert all(WordFlag.TRANSLATOR_INSERTION in w.flags for w in words)

    def test_punctuation_attaches_to_previous_word(self):
        events = milestone_verse("Gen.1.1", word("earth") + [Text(".")])
        words = run(events).verses[0].words
        assert len(words) == 1
        assert words[0].text == "earth."
        assert words[0].strongs == ()

    def test_punctuation_keeps_word_annotations(self):
        events = milestone_verse("Gen.1.1", word("earth", lemma="strong:H0776") + [Text(".")])
        assert run(events).verses[0].words[0].strongs == ("H776",)

    def test_leading_punctuation_becomes_word(self):
        events = milestone_verse("Gen.1.1", [Text(": ")] + word("And"))
        words = run(events).verses[0].words
        assert [w.text for w in words] == [":", "And"]
        assert words[0].origin == WordOrigin.TAIL_TEXT

    def test_tail_text_words(self):
        events = milestone_verse("Gen.1.1", word("God") + [Text(" said unto them, ")] + word("Be"))
        words = run(events).verses[0].words
        assert [w.text for w in words] == ["God", "said", "unto", "them,", "Be"]
        assert [w.position for w in words] == [1, 2, 3, 4, 5]
        assert words[1].origin == WordOrigin.TAIL_TEXT

    def test_whitespace_tail_ignored(self):
        events = milestone_verse("Gen.1.1", word("In") + [Text(" \n ")] + word("the"))
        assert len(run(events).verses[0].words) == 2

    def test_words_outside_verse_discarded(self):
        events = word("Title") + milestone_verse("Gen.1.1", word("In"))
        result = run(events)
        assert [w.text for w in result.verses[0].words] == ["In"]

    def test_word_gematria(self):
        events = milestone_verse("Gen.1.1", word("God"))
        assert run(events).verses[0].words[0].gematria.standard == 26


class TestNotes:
    """Tests for note suppression."""

    def test_note_text_suppressed(self):
        events = milestone_verse("Gen.1.2", word("void") + note("Heb. nothing") + word("and"))
        assert run(events).verses[0].text == "void and"

    def test_words_inside_note_suppressed(self):
        events = milestone_verse("Gen.1.2", [OpenTag("note", {})] + word("hidden") + [CloseTag("note", {})])
        assert run(events).verses[0].words == ()

    def test_nested_notes(self):
        body = [OpenTag("note", {}), OpenTag("note", {}), Text("a"), CloseTag("note", {}), Text("b"),
                CloseTag("note", {})] + word("c")
        assert run(milestone_verse("Gen.1.1", body)).verses[0].text == "c"

    def test_word_close_inside_note_keeps_outer_word_open(self):
        lemma = {"lemma": "strong:H0430"}
        body = [OpenTag("w", lemma), Text("the "), OpenTag("note", {})] + word("noted", lemma="strong:H0001") + [
            CloseTag("note", {}), Text("Lord"), CloseTag("w", lemma), Text(".")]
        words = run(milestone_verse("Gen.1.1", body)).verses[0].words

        assert [w.text for w in words] == ["the", "Lord."]
        assert all(w.strongs == ("H430",) for w in words)
        assert all(w.origin == WordOrigin.WORD_TAG for w in words)

    def test_insertion_close_inside_note_keeps_insertion_open(self):
        attributes = {"type": "added"}
        body = [OpenTag("transChange", attributes), Text("it "), OpenTag("note", {})] + insertion("aside") + [
            CloseTag("note", {}), Text("was"), CloseTag("transChange", attributes)]
        words = run(milestone_verse("Gen.1.2", body)).verses[0].words

        assert [w.text for w in words] == ["it", "was"]
        assert all(WordFlag.TRANSLATOR_INSERTION in w.flags for w in words)

    def test_depth_never_negative(self):
        machine = SegmentationMachine()
        machine.feed(CloseTag("note", {}))
        assert machine.state.note_depth == 0


class TestSegments:
    """Tests for seg type recording."""

    def test_seg_type_recorded_on_last_word(self):
        body = word("Selah") + [OpenTag("seg", {"type": "x-selah"}), CloseTag("seg", {"type": "x-selah"})]
        words = run(milestone_verse("Ps.3.2", body)).verses[0].words
        assert words[0].segments == ("x-selah",)

    def test_seg_without_words_ignored(self):
        body = [OpenTag("seg", {"type": "x-selah"}), CloseTag("seg", {"type": "x-selah"})]
        assert run(milestone_verse("Ps.3.2", body)).verses[0].words == ()


class TestColophons:
    """Tests for colophon capture and attachment."""

    COLOPHON = {"type": "colophon", "osisID": "Rom.c"}

    def colophon(self, body):
        return [OpenTag("div", self.COLOPHON)] + body + [CloseTag("div", self.COLOPHON)]

    def test_colophon_attached_to_last_verse(self):
        events = milestone_verse("Rom.16.26", word("made")) + milestone_verse("Rom.16.27", word("Amen") + [Text(".")])
        events += self.colophon([Text("Written to the Romans")])
        result = run(events)

        last = result.verses[-1]
        assert last.has_colophon
        assert last.colophon_range == (2, 5)
        assert [w.text for w in last.colophon_words] == ["Written", "to", "the", "Romans"]
        assert all(w.is_colophon for w in last.colophon_words)
        assert last.text == "Amen."
        assert not result.verses[0].has_colophon

    def test_colophon_word_tags_and_insertions(self):
        events = milestone_verse("Rom.16.27", word("Amen"))
        events += self.colophon(word("Corinthus", lemma="strong:G2882") + insertion("and sent"))
        colophon_words = run(events).verses[0].colophon_words
        assert colophon_words[0].strongs == ("G2882",)
        assert colophon_words[1].is_translator_insertion
        assert colophon_words[1].is_colophon

    def test_nested_div_does_not_close_colophon(self):
        inner = {"type": "paragraph"}
        events = milestone_verse("Rom.16.27", word("Amen"))
        events += self.colophon([OpenTag("div", inner), Text("Written"), CloseTag("div", inner), Text("to")])
        verse = run(events).verses[0]
        assert [w.text for w in verse.colophon_words] == ["Written", "to"]

    def test_empty_colophon_not_recorded(self):
        events = milestone_verse("Rom.16.27", word("Amen")) + self.colophon([Text("  ")])
        result = run(events)
        assert result.colophons == []
        assert not result.verses[0].has_colophon

    def test_colophon_without_verse_reported(self):
        result = run(self.colophon([Text("Written")]))
        diagnostics = result.diagnostics_of(DiagnosticKind.UNATTACHED_COLOPHON)
        assert len(diagnostics) == 1
        assert diagnostics[0].book == "Rom"
        assert result.verses == []

    def test_colophon_div_without_book_ignored(self):
        attributes = {"type": "colophon", "osisID": "Rom"}
        machine = SegmentationMachine()
        machine.feed(OpenTag("div", attributes))
        assert machine.state.mode == ParseMode.OUTSIDE_VERSE


class TestParseVerseRef:
    """Tests for parse_verse_ref."""

    def test_valid(self):
        ref = parse_verse_ref("1Cor.13.4", "s1")
        assert (ref.book, ref.chapter, ref.number, ref.start_id) == ("1Cor", 13, 4, "s1")
        assert ref.verse_id == "1Cor.13.4"

    @pytest.mark.parametrize("osis_id", ["Gen", "Gen.1", "Gen.1.1.1", ".1.1", "Gen.a.1", "Gen.1.0", "Gen.0.1"])
    def test_invalid(self, osis_id):
        with pytest.raises(KjvParseError):
            parse_verse_ref(osis_id)

import io
import json

import pytest

from usfx_tsv.convert import convert_file, iter_records, main
from usfx_tsv.errors import MalformedXml, MissingContext
from usfx_tsv.events import EndTag, StartTag, Text, iter_events
from usfx_tsv.extractor import extract
from usfx_tsv.model import VerseNumber, VerseRecord
from usfx_tsv.tsv import write_records

SAMPLE_USFX = """<?xml version="1.0" encoding="utf-8"?>
<usfx xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xsi:noNamespaceSchemaLocation="usfx.xsd">
<languageCode>eng</languageCode>
<book id="GEN">
<id id="GEN">World English Bible</id>
<h>Genesis</h>
<toc level="1">The First Book of Moses, Commonly Called Genesis</toc>
<c id="1"/>
<s>The Creation</s>
<p><v id="1" bcv="GEN.1.1"/>In the beginning, God<f caller="+"><fr>1:1 </fr><ft>The Hebrew word rendered &#x201C;God&#x201D; is &#x201C;Elohim.&#x201D;</ft></f> created the heavens and the earth.<ve/>
<v id="2" bcv="GEN.1.2"/>The earth was formless and empty.<ve/></p>
<c id="2"/>
<p><v id="1" bcv="GEN.2.1"/>The heavens <add>and</add> the earth were finished, &amp; all their vast array.<ve/></p>
</book>
<book id="EXO">
<c id="1"/>
<p><v id="6-7"/>Joseph died, and all his brothers,
and all that generation.<ve/></p>
</book>
</usfx>
"""

EXPECTED_TSV = (
    "GEN\t1\t1\tIn the beginning, God created the heavens and the earth.\n"
    "GEN\t1\t2\tThe earth was formless and empty.\n"
    "GEN\t2\t1\tThe heavens and the earth were finished, & all their vast array.\n"
    "EXO\t1\t6-7\tJoseph died, and all his brothers, and all that generation.\n"
)


def sample_stream():
    return io.BytesIO(SAMPLE_USFX.encode("utf-8"))


def test_tokenizer_events():
    doc = b'<usfx><book id="GEN"><c id="1"/>hi <w>there</w></book></usfx>'
    events = list(iter_events(io.BytesIO(doc)))
    assert events == [
        StartTag("usfx", {}),
        StartTag("book", {"id": "GEN"}),
        StartTag("c", {"id": "1"}),
        EndTag("c"),
        Text("hi "),
        StartTag("w", {}),
        Text("there"),
        EndTag("w"),
        EndTag("book"),
        EndTag("usfx"),
    ]


def test_tokenizer_strips_namespaces():
    doc = b'<u:usfx xmlns:u="urn:x"><u:book u:id="GEN"/></u:usfx>'
    events = list(iter_events(io.BytesIO(doc)))
    assert events[1] == StartTag("book", {"id": "GEN"})


def test_end_to_end_sample():
    out = io.StringIO()
    count = write_records(iter_records(sample_stream()), out)
    assert count == 4
    assert out.getvalue() == EXPECTED_TSV


def test_small_chunks_give_same_output():
    records = list(extract_with_chunk_size(7))
    assert records == list(iter_records(sample_stream()))


def extract_with_chunk_size(size):
    return extract(iter_events(sample_stream(), chunk_size=size))


def test_text_stream_input():
    records = list(iter_records(io.StringIO(SAMPLE_USFX.split("\n", 1)[1])))
    assert [str(r.verse) for r in records] == ["1", "2", "1", "6-7"]


def test_text_stream_with_xml_declaration():
    records = list(iter_records(io.StringIO(SAMPLE_USFX)))
    assert [r.to_fields() for r in records] == [
        tuple(line.split("\t")) for line in EXPECTED_TSV.splitlines()
    ]


@pytest.mark.parametrize("doc", [b"", ""])
def test_empty_input(doc):
    stream = io.BytesIO(doc) if isinstance(doc, bytes) else io.StringIO(doc)
    with pytest.raises(MalformedXml):
        list(iter_events(stream))


def test_truncated_document():
    doc = b'<usfx><book id="GEN"><c id="1"/><v id="1"/>In the beginning'
    with pytest.raises(MalformedXml):
        list(iter_records(io.BytesIO(doc)))


def test_mismatched_tags():
    doc = b'<usfx><book id="GEN"><c id="1"/><p><v id="1"/>text</book></p></usfx>'
    with pytest.raises(MalformedXml):
        list(iter_records(io.BytesIO(doc)))


def test_writer_keeps_quotes_unquoted():
    r = VerseRecord(book="GEN", chapter=3, verse=VerseNumber(1), text='He said, "Has God really said?"')
    out = io.StringIO()
    write_records([r], out)
    assert out.getvalue() == 'GEN\t3\t1\tHe said, "Has God really said?"\n'


def test_convert_file_is_idempotent(tmp_path):
    src = tmp_path / "source.xml"
    src.write_text(SAMPLE_USFX, encoding="utf-8")

    first, second = io.StringIO(), io.StringIO()
    assert convert_file(src, first) == 4
    assert convert_file(src, second) == 4
    assert first.getvalue() == second.getvalue() == EXPECTED_TSV


def test_convert_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        convert_file(tmp_path / "missing.xml", io.StringIO())


def test_convert_file_keeps_lines_before_failure(tmp_path):
    src = tmp_path / "source.xml"
    src.write_text(
        '<usfx><book id="GEN"><c id="1"/><v id="1"/>first<v id="2"/>second</book>'
        '<c id="1"/></usfx>',
        encoding="utf-8",
    )
    out = io.StringIO()
    with pytest.raises(MissingContext):
        convert_file(src, out)
    assert out.getvalue() == "GEN\t1\t1\tfirst\nGEN\t1\t2\tsecond\n"


def _write_source(root, text):
    xml_dir = root / "xml"
    xml_dir.mkdir()
    (xml_dir / "source.xml").write_text(text, encoding="utf-8")
    return xml_dir


def test_main_success(tmp_path, monkeypatch, capsys):
    _write_source(tmp_path, SAMPLE_USFX)
    monkeypatch.chdir(tmp_path)

    out = io.StringIO()
    assert main([], out=out) == 0
    assert out.getvalue() == EXPECTED_TSV
    assert "[ok] Wrote 4 verses." in capsys.readouterr().err


def test_main_uses_tag_table_file(tmp_path, monkeypatch):
    xml_dir = _write_source(tmp_path, SAMPLE_USFX)
    (xml_dir / "usfx_tags.json").write_text(
        json.dumps({"annotation": ["f", "s", "h", "toc", "id", "add"]}), encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    out = io.StringIO()
    assert main([], out=out) == 0
    assert "GEN\t2\t1\tThe heavens the earth were finished, & all their vast array.\n" in out.getvalue()


def test_main_missing_source(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main([], out=io.StringIO()) == 2
    assert "[error]" in capsys.readouterr().err


def test_main_missing_context(tmp_path, monkeypatch, capsys):
    _write_source(tmp_path, '<usfx><c id="1"/><v id="1"/>orphan</usfx>')
    monkeypatch.chdir(tmp_path)

    out = io.StringIO()
    assert main([], out=out) == 1
    assert out.getvalue() == ""
    assert "[error] MissingContext" in capsys.readouterr().err


def test_main_malformed(tmp_path, monkeypatch, capsys):
    _write_source(tmp_path, "<usfx><book id='GEN'>")
    monkeypatch.chdir(tmp_path)

    assert main([], out=io.StringIO()) == 1
    assert "[error] MalformedXml" in capsys.readouterr().err

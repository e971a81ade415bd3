import httpx
import pytest

from postcodes.geonames_service.errors import (
    InvalidCountryCode,
    MalformedArchive,
    MalformedRecord,
    MemberNotFound,
    UnexpectedStatus,
)
from postcodes.geonames_service.geonames import fetch_country
from postcodes.models.entry import Field

# Samples derived from the GeoNames postal code database, licensed under the
# Creative Commons Attribution 4.0 License.
DE_SAMPLES = {
    10351: [
        "DE", "54668", "Ferschweiler", "Rheinland-Pfalz", "RP", "", "00",
        "Eifelkreis Bitburg-Prüm", "07232", "49.8667", "6.4", "4",
    ],
    11193: [
        "DE", "56479", "Neustadt (Westerwald)", "Rheinland-Pfalz", "RP", "", "00",
        "Westerwaldkreis", "07143", "50.6333", "8.0333", "",
    ],
}
DE_LINE_COUNT = 16477


@pytest.fixture(scope="module")
def de_zip(make_zip):
    lines = []
    for number in range(1, DE_LINE_COUNT + 1):
        if number in DE_SAMPLES:
            lines.append("\t".join(DE_SAMPLES[number]))
        else:
            lines.append(
                f"DE\t{number:05d}\tOrt {number}\tBayern\tBY\tOberbayern\t091"
                f"\tLandkreis\t09184\t48.1\t11.5\t4"
            )
    data = "\n".join(lines) + "\n"
    return make_zip({"readme.txt": "GeoNames export\n", "DE.txt": data})


def recording_client(handler):
    requests = []

    def record(request: httpx.Request):
        requests.append(request)
        return handler(request)

    return httpx.Client(transport=httpx.MockTransport(record)), requests


def test_fetch_country_not_modified():
    client, requests = recording_client(lambda request: httpx.Response(304))

    result = fetch_country("de", "current_etag", client)

    assert result.entries == []
    assert result.modified is False
    assert result.etag == "current_etag"
    assert len(requests) == 1
    assert str(requests[0].url) == "https://download.geonames.org/export/zip/DE.zip"
    assert requests[0].method == "GET"
    assert requests[0].headers["If-None-Match"] == "current_etag"


def test_fetch_country_modified(de_zip):
    client, requests = recording_client(
        lambda request: httpx.Response(
            200, content=de_zip, headers={"ETag": "new_etag"}
        )
    )

    result = fetch_country("de", "old_etag", client)

    assert len(result.entries) == DE_LINE_COUNT
    assert result.modified is True
    assert result.etag == "new_etag"
    assert requests[0].headers["If-None-Match"] == "old_etag"
    for line, fields in DE_SAMPLES.items():
        entry = result.entries[line - 1]
        for field in Field:
            assert entry[field] == fields[field], (line, field.name)


@pytest.mark.parametrize("code", ["", "d", "deu", "Deutschland"])
def test_fetch_country_invalid_code_makes_no_request(code):
    client, requests = recording_client(lambda request: httpx.Response(500))

    with pytest.raises(InvalidCountryCode):
        fetch_country(code, "", client)
    assert requests == []


def test_fetch_country_unchanged_resource_is_idempotent(make_zip):
    current = '"5f3a-61c2"'
    archive = make_zip({"LI.txt": "LI\t9485\tNendeln\n"})

    def handler(request: httpx.Request):
        if request.headers["If-None-Match"] == current:
            return httpx.Response(304)
        return httpx.Response(200, content=archive, headers={"ETag": current})

    client, requests = recording_client(handler)

    first = fetch_country("li", "", client)
    assert first.modified is True
    assert [e.place_name for e in first.entries] == ["Nendeln"]

    for _ in range(2):
        again = fetch_country("LI", first.etag, client)
        assert again.modified is False
        assert again.entries == []
        assert again.etag == current
    assert len(requests) == 3


def test_fetch_country_missing_member(make_zip):
    archive = make_zip({"AT.txt": "AT\t1010\tWien\n"})
    client, _ = recording_client(
        lambda request: httpx.Response(200, content=archive, headers={"ETag": "x"})
    )

    with pytest.raises(MemberNotFound) as exc_info:
        fetch_country("de", "", client)
    assert exc_info.value.filename == "DE.txt"


def test_fetch_country_malformed_archive():
    client, _ = recording_client(
        lambda request: httpx.Response(200, content=b"<html>maintenance</html>")
    )

    with pytest.raises(MalformedArchive):
        fetch_country("de", "", client)


def test_fetch_country_unexpected_status():
    client, _ = recording_client(lambda request: httpx.Response(404))

    with pytest.raises(UnexpectedStatus) as exc_info:
        fetch_country("xx", "", client)
    assert exc_info.value.status_code == 404


def test_fetch_country_malformed_record(make_zip):
    archive = make_zip({"DE.txt": 'DE\t01067\tDresden\nDE\t"01069\tDresden\n'})
    client, _ = recording_client(
        lambda request: httpx.Response(200, content=archive, headers={"ETag": "x"})
    )

    with pytest.raises(MalformedRecord) as exc_info:
        fetch_country("de", "", client)
    assert exc_info.value.line is not None
    assert exc_info.value.__cause__ is not None

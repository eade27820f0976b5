import pytest

from jukebox.domain.navigation import (
    AdjacencyEngine,
    ContextResolver,
    NavigationToken,
    PlaybackContext,
    decode_navigation_token,
    encode_navigation_token,
)
from jukebox.domain.playback import DirectiveAdapter, MediaUrlBuilder
from jukebox.models.dto import PlaylistDTO
from jukebox.support.identity import derive_artist_id
from tests.support.stubs import InMemoryCatalog, UnavailableCatalog, make_track


def _adapter(catalog):
    engine = AdjacencyEngine(ContextResolver(catalog), catalog)
    return DirectiveAdapter(catalog, engine, MediaUrlBuilder("https://media.test"))


def _token(track_id, context=None):
    return encode_navigation_token(NavigationToken(track_id, context or PlaybackContext.all()))


def _body(request, token=None, offset=0):
    body = {"version": "1.0", "request": request, "context": {}}
    if token is not None:
        body["context"]["AudioPlayer"] = {"token": token, "offsetInMilliseconds": offset}
    return body


def _intent(name, slots=None, token=None, offset=0):
    intent = {"name": name}
    if slots is not None:
        intent["slots"] = {key: {"name": key, "value": value} for key, value in slots.items()}
    return _body({"type": "IntentRequest", "intent": intent}, token, offset)


def _play_directive(response):
    directives = response["response"]["directives"]
    assert len(directives) == 1
    assert directives[0]["type"] == "AudioPlayer.Play"
    return directives[0]


def _speech(response):
    return response["response"]["outputSpeech"]["text"]


@pytest.mark.unit
def test_unmatched_title_is_spoken_not_found(catalog):
    response = _adapter(catalog).handle(_intent("PlaySongIntent", {"songName": "Nothing Like It"}))
    assert _speech(response) == "Nothing Like It not found."
    assert "directives" not in response["response"]
    assert response["response"]["shouldEndSession"] is False


@pytest.mark.unit
def test_title_match_plays_single_track(catalog):
    response = _adapter(catalog).handle(_intent("PlaySongIntent", {"songName": "second  song"}))
    directive = _play_directive(response)

    assert directive["playBehavior"] == "REPLACE_ALL"
    stream = directive["audioItem"]["stream"]
    assert stream["url"] == "https://media.test/api/mp3/T2.mp3"
    assert stream["offsetInMilliseconds"] == 0
    assert "expectedPreviousToken" not in stream
    assert decode_navigation_token(stream["token"]).value == NavigationToken("T2", PlaybackContext.single())
    assert directive["audioItem"]["metadata"] == {
        "title": "Second Song",
        "subtitle": "Band",
        "art": {"sources": [{"url": "https://media.test/api/art/T2.jpg"}]},
    }
    assert _speech(response) == "Playing Second Song."
    assert response["response"]["shouldEndSession"] is True


@pytest.mark.unit
def test_artist_match_plays_in_artist_context(catalog):
    response = _adapter(catalog).handle(_intent("PlayArtistIntent", {"artistName": "band"}))
    token = decode_navigation_token(_play_directive(response)["audioItem"]["stream"]["token"]).value
    assert token == NavigationToken("T2", PlaybackContext.artist(derive_artist_id("Band")))
    assert _speech(response) == "Playing songs by Band."


@pytest.mark.unit
def test_artist_keywords_are_searched():
    catalog = InMemoryCatalog(
        tracks=[make_track("k1", "Anthem", "The Long Name")],
        artist_keywords={derive_artist_id("The Long Name"): "tln, longname"},
    )
    response = _adapter(catalog).handle(_intent("PlayArtistIntent", {"artistName": "TLN"}))
    assert _play_directive(response)["audioItem"]["metadata"]["title"] == "Anthem"


@pytest.mark.unit
def test_unmatched_artist_and_playlist_are_spoken(catalog):
    adapter = _adapter(catalog)
    assert _speech(adapter.handle(_intent("PlayArtistIntent", {"artistName": "Nobody"}))) == (
        "No songs by Nobody were found."
    )
    assert _speech(adapter.handle(_intent("PlayPlaylistIntent", {"playlistName": "Road Trip"}))) == (
        "No playlist called Road Trip was found."
    )


@pytest.mark.unit
def test_playlist_plays_from_its_first_position(catalog):
    catalog.playlists["pl.1"] = PlaylistDTO(id="pl.1", name="Road Trip", track_ids=["T3", "T1"])
    response = _adapter(catalog).handle(_intent("PlayPlaylistIntent", {"playlistName": "road"}))

    token = decode_navigation_token(_play_directive(response)["audioItem"]["stream"]["token"]).value
    assert token == NavigationToken("T3", PlaybackContext.playlist("pl.1"))
    assert _speech(response) == "Playing the playlist Road Trip."


@pytest.mark.unit
def test_empty_playlist_is_spoken_not_found(catalog):
    catalog.playlists["pl.2"] = PlaylistDTO(id="pl.2", name="Empty Box", track_ids=[])
    response = _adapter(catalog).handle(_intent("PlayPlaylistIntent", {"playlistName": "Empty Box"}))
    assert "directives" not in response["response"]


@pytest.mark.unit
@pytest.mark.parametrize(
    "name,slot",
    [
        ("PlaySongIntent", "songName"),
        ("PlayArtistIntent", "artistName"),
        ("PlayPlaylistIntent", "playlistName"),
    ],
)
def test_empty_slot_plays_everything(catalog, name, slot):
    response = _adapter(catalog).handle(_intent(name, {slot: "  "}))
    token = decode_navigation_token(_play_directive(response)["audioItem"]["stream"]["token"]).value
    assert token == NavigationToken("T1", PlaybackContext.all())


@pytest.mark.unit
def test_play_all_on_empty_library_is_spoken():
    response = _adapter(InMemoryCatalog()).handle(_intent("PlayAllIntent"))
    assert _speech(response) == "There are no songs to play."


@pytest.mark.unit
def test_nearly_finished_enqueues_the_next_track(catalog):
    incoming = _token("T2")
    response = _adapter(catalog).handle(
        _body({"type": "AudioPlayer.PlaybackNearlyFinished", "token": incoming})
    )
    directive = _play_directive(response)

    assert directive["playBehavior"] == "ENQUEUE"
    stream = directive["audioItem"]["stream"]
    assert stream["expectedPreviousToken"] == incoming
    assert decode_navigation_token(stream["token"]).value == NavigationToken("T3", PlaybackContext.all())
    assert "outputSpeech" not in response["response"]


@pytest.mark.unit
@pytest.mark.parametrize("token", [None, "", "not-a-token", _token("T3")])
def test_nearly_finished_without_successor_is_empty(catalog, token):
    request = {"type": "AudioPlayer.PlaybackNearlyFinished"}
    if token is not None:
        request["token"] = token
    assert _adapter(catalog).handle(_body(request)) == {"version": "1.0", "response": {}}


@pytest.mark.unit
def test_resume_keeps_token_and_offset(catalog):
    token = _token("T2", PlaybackContext.artist(derive_artist_id("Band")))
    response = _adapter(catalog).handle(_intent("AMAZON.ResumeIntent", token=token, offset=42000))
    stream = _play_directive(response)["audioItem"]["stream"]
    assert stream["token"] == token
    assert stream["offsetInMilliseconds"] == 42000


@pytest.mark.unit
@pytest.mark.parametrize("token", [None, "garbage", _token("deleted")])
def test_resume_without_usable_token_starts_everything(catalog, token):
    response = _adapter(catalog).handle(_intent("AMAZON.ResumeIntent", token=token, offset=5000))
    stream = _play_directive(response)["audioItem"]["stream"]
    assert decode_navigation_token(stream["token"]).value == NavigationToken("T1", PlaybackContext.all())
    assert stream["offsetInMilliseconds"] == 0


@pytest.mark.unit
@pytest.mark.parametrize("offset", [float("inf"), float("-inf"), float("nan"), "soon"])
def test_resume_with_unusable_offset_restarts_track(catalog, offset):
    token = _token("T2")
    response = _adapter(catalog).handle(_intent("AMAZON.ResumeIntent", token=token, offset=offset))
    stream = _play_directive(response)["audioItem"]["stream"]
    assert (stream["token"], stream["offsetInMilliseconds"]) == (token, 0)


@pytest.mark.unit
def test_physical_play_button_resumes(catalog):
    token = _token("T3")
    response = _adapter(catalog).handle(
        _body({"type": "PlaybackController.PlayCommandIssued"}, token=token, offset=1200)
    )
    stream = _play_directive(response)["audioItem"]["stream"]
    assert (stream["token"], stream["offsetInMilliseconds"]) == (token, 1200)


@pytest.mark.unit
def test_voice_next_and_previous(catalog):
    adapter = _adapter(catalog)

    forward = adapter.handle(_intent("AMAZON.NextIntent", token=_token("T1"), offset=9000))
    stream = _play_directive(forward)["audioItem"]["stream"]
    assert decode_navigation_token(stream["token"]).value == NavigationToken("T2", PlaybackContext.all())
    assert stream["offsetInMilliseconds"] == 0
    assert _play_directive(forward)["playBehavior"] == "REPLACE_ALL"

    back = adapter.handle(_intent("AMAZON.PreviousIntent", token=_token("T2")))
    assert decode_navigation_token(_play_directive(back)["audioItem"]["stream"]["token"]).value.track_id == "T1"


@pytest.mark.unit
def test_voice_navigation_at_boundaries_is_spoken(catalog):
    adapter = _adapter(catalog)
    assert _speech(adapter.handle(_intent("AMAZON.NextIntent", token=_token("T3")))) == "There is no next song."
    assert _speech(adapter.handle(_intent("AMAZON.PreviousIntent", token=_token("T1")))) == (
        "There is no previous song."
    )
    assert _speech(adapter.handle(_intent("AMAZON.NextIntent"))) == "Nothing is playing right now."
    single = _token("T2", PlaybackContext.single())
    assert _speech(adapter.handle(_intent("AMAZON.NextIntent", token=single))) == "There is no next song."


@pytest.mark.unit
def test_physical_controls_are_silent_at_boundaries(catalog):
    adapter = _adapter(catalog)
    empty = {"version": "1.0", "response": {}}

    assert adapter.handle(_body({"type": "PlaybackController.NextCommandIssued"}, token=_token("T3"))) == empty
    assert adapter.handle(_body({"type": "PlaybackController.PreviousCommandIssued"}, token=_token("T1"))) == empty
    assert adapter.handle(_body({"type": "PlaybackController.NextCommandIssued"})) == empty

    moved = adapter.handle(_body({"type": "PlaybackController.NextCommandIssued"}, token=_token("T1")))
    assert _play_directive(moved)["audioItem"]["metadata"]["title"] == "Second Song"


@pytest.mark.unit
@pytest.mark.parametrize(
    "body",
    [
        _intent("AMAZON.PauseIntent"),
        _intent("AMAZON.StopIntent"),
        _intent("AMAZON.CancelIntent"),
        _body({"type": "PlaybackController.PauseCommandIssued"}),
    ],
)
def test_pause_and_stop_emit_stop_directive(catalog, body):
    assert _adapter(catalog).handle(body) == {
        "version": "1.0",
        "response": {"directives": [{"type": "AudioPlayer.Stop"}], "shouldEndSession": True},
    }


@pytest.mark.unit
def test_launch_help_and_fallback_keep_session_open(catalog):
    adapter = _adapter(catalog)
    for body in (
        _body({"type": "LaunchRequest"}),
        _intent("AMAZON.HelpIntent"),
        _intent("AMAZON.ShuffleOnIntent"),
    ):
        response = adapter.handle(body)
        assert response["response"]["outputSpeech"]["type"] == "PlainText"
        assert response["response"]["shouldEndSession"] is False


@pytest.mark.unit
@pytest.mark.parametrize(
    "request_type",
    [
        "SessionEndedRequest",
        "AudioPlayer.PlaybackStarted",
        "AudioPlayer.PlaybackFinished",
        "AudioPlayer.PlaybackStopped",
        "System.ExceptionEncountered",
    ],
)
def test_events_are_acknowledged_empty(catalog, request_type):
    assert _adapter(catalog).handle(_body({"type": request_type})) == {"version": "1.0", "response": {}}


@pytest.mark.unit
def test_playback_failure_is_logged(catalog, caplog):
    request = {
        "type": "AudioPlayer.PlaybackFailed",
        "token": _token("T1"),
        "error": {"type": "MEDIA_ERROR_UNKNOWN", "message": "404"},
    }
    assert _adapter(catalog).handle(_body(request)) == {"version": "1.0", "response": {}}
    assert "Playback failed" in caplog.text


@pytest.mark.unit
@pytest.mark.parametrize("body", [{}, None, [], {"request": "nope"}])
def test_malformed_bodies_are_acknowledged(catalog, body):
    assert _adapter(catalog).handle(body) == {"version": "1.0", "response": {}}


@pytest.mark.unit
def test_unexpected_failure_in_intent_falls_back_to_speech(catalog):
    class ExplodingCatalog(InMemoryCatalog):
        def search_tracks_by_title(self, query):
            raise RuntimeError("boom")

    adapter = _adapter(ExplodingCatalog(tracks=catalog.tracks.values()))
    response = adapter.handle(_intent("PlaySongIntent", {"songName": "First"}))
    assert response["response"]["shouldEndSession"] is False
    assert "directives" not in response["response"]


@pytest.mark.unit
def test_storage_outage_reads_as_not_found():
    adapter = _adapter(UnavailableCatalog())
    assert _speech(adapter.handle(_intent("PlaySongIntent", {"songName": "Anything"}))) == "Anything not found."
    assert _speech(adapter.handle(_intent("PlayAllIntent"))) == "There are no songs to play."


def _operation_labels():
    from jukebox.observability.metrics import SKILL_REQUESTS

    return {
        sample.labels["operation"]
        for metric in SKILL_REQUESTS.collect()
        for sample in metric.samples
        if sample.name.endswith("_total") and sample.labels.get("protocol") == "alexa"
    }


@pytest.mark.unit
def test_request_labels_stay_bounded_for_unknown_input(catalog):
    adapter = _adapter(catalog)
    adapter.handle(_intent("PlaySongIntent", {"songName": "Second Song"}))
    before = _operation_labels()

    for n in range(50):
        adapter.handle(_intent(f"Made.Up{n}Intent"))
        adapter.handle(_body({"type": f"Custom.Event{n}"}))
        adapter.handle(_intent(["not", "a", "name"]))

    added = _operation_labels() - before
    assert added <= {"unsupported", "IntentRequest"}
    assert "PlaySongIntent" in before

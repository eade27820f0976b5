"""Utterances for the directive flow."""

WELCOME = "Welcome to your jukebox. Ask for a song, an artist or a playlist to start playing."
HELP = (
    "Say the name of a song, an artist or a playlist. "
    "For example, say: play songs by your favourite artist."
)
FALLBACK = "You can ask me to play a song or an artist by name."
NOTHING_TO_PLAY = "There are no songs to play."
NOTHING_PLAYING = "Nothing is playing right now."
NO_NEXT = "There is no next song."
NO_PREVIOUS = "There is no previous song."


def song_not_found(title: str) -> str:
    return f"{title} not found."


def artist_not_found(artist: str) -> str:
    return f"No songs by {artist} were found."


def playlist_not_found(name: str) -> str:
    return f"No playlist called {name} was found."


def playing_track(title: str) -> str:
    return f"Playing {title}."


def playing_artist(artist: str) -> str:
    return f"Playing songs by {artist}."


def playing_playlist(name: str) -> str:
    return f"Playing the playlist {name}."

"""Read-only catalog listing."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from sqlalchemy import func

from jukebox.database.db_manager import db, Artist, Playlist, Track

catalog_bp = Blueprint('catalog_bp', __name__, url_prefix='/api')

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def _not_found():
    return jsonify({"error": "not_found"}), 404


@catalog_bp.route('/tracks', methods=['GET'])
def list_tracks():
    page = max(1, _int_arg('page', 1))
    limit = min(max(1, _int_arg('limit', DEFAULT_PAGE_SIZE)), MAX_PAGE_SIZE)

    query = Track.query.order_by(Track.added_at.desc(), Track.id.desc())
    total = query.count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return jsonify({
        "tracks": [row.to_dict() for row in rows],
        "page": page,
        "limit": limit,
        "total": total,
    })


@catalog_bp.route('/tracks/<track_id>', methods=['GET'])
def get_track(track_id: str):
    track = db.session.get(Track, track_id)
    if track is None:
        return _not_found()
    return jsonify(track.to_dict())


@catalog_bp.route('/artists', methods=['GET'])
def list_artists():
    track_count = func.count(Track.id)
    rows = (
        db.session.query(Artist, track_count)
        .outerjoin(Track, Track.artist_id == Artist.id)
        .group_by(Artist.id)
        .order_by(Artist.name.asc())
        .all()
    )
    return jsonify({"artists": [artist.to_dict(count) for artist, count in rows]})


@catalog_bp.route('/playlists', methods=['GET'])
def list_playlists():
    rows = Playlist.query.order_by(Playlist.created_at.desc(), Playlist.id.desc()).all()
    return jsonify({"playlists": [row.to_dict() for row in rows]})


@catalog_bp.route('/playlists/<playlist_id>', methods=['GET'])
def get_playlist(playlist_id: str):
    playlist = db.session.get(Playlist, playlist_id)
    if playlist is None:
        return _not_found()
    return jsonify(playlist.to_dict(include_tracks=True))

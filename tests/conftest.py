"""Shared fixtures for the checkers peer host tests.

Fixtures:
    event_log      - Callable stand-in for log_event that records event types.
    room           - Two GameSessions (alice = FIRST, bob = SECOND) wired through
                     a real PeerChannel on a private queue.
    app / socketio - Flask app with the background worker disabled; peer
                     messages stay on the notification queue until drain() runs.
"""

import queue

import pytest
from flask_jwt_extended import create_access_token

from checkers import create_app, workers
from checkers.extensions import notification_queue, sid_to_user_map
from checkers.game_core import Board, Piece, PieceKind, Position, Team
from checkers.services.game_factory import GameFactory
from checkers.services.peer_channel import PeerChannel


# ---------------------------------------------------------------------------
# Board builders
# ---------------------------------------------------------------------------


def man(x, y, team=Team.FIRST):
    return Piece(Position(x, y), PieceKind.MAN, team)


def king(x, y, team=Team.FIRST):
    return Piece(Position(x, y), PieceKind.KING, team)


def board_of(*pieces):
    return Board(pieces)


# ---------------------------------------------------------------------------
# Logging stand-ins
# ---------------------------------------------------------------------------


class EventLog:
    """Records log_event calls instead of writing to LOG_FILE."""

    def __init__(self):
        self.events = []

    def __call__(self, event_type, message, sid=None, game_id=None, extra_data=None):
        self.events.append((event_type, message))

    @property
    def types(self):
        return [event_type for event_type, _ in self.events]


@pytest.fixture
def event_log():
    return EventLog()


# ---------------------------------------------------------------------------
# Two peers on an in-memory channel
# ---------------------------------------------------------------------------


class Room:
    def __init__(self, factory, channel_queue, stats):
        self.queue = channel_queue
        self.stats = stats
        self.alice, self.bob = factory.create_private_room('alice', 'bob')
        self.sessions = {'alice': self.alice, 'bob': self.bob}

    def deliver(self):
        """Delivers every queued channel message; returns the UI notifications."""
        notifications = []
        while True:
            try:
                msg = self.queue.get_nowait()
            except queue.Empty:
                return notifications
            recipient = self.sessions.get(msg['room'])
            if recipient is not None:
                notifications.extend(recipient.receive_message(msg['payload']))

    def pending(self):
        return list(self.queue.queue)


@pytest.fixture
def room(event_log):
    channel_queue = queue.Queue()
    stats = []
    closed = []
    factory = GameFactory(
        log_event=event_log,
        peer_channel=PeerChannel(channel_queue),
        finalize_session_callback=closed.append,
        log_stats=stats.append,
    )
    r = Room(factory, channel_queue, stats)
    r.closed = closed
    return r


def play(session, *moves):
    """Plays ((fx, fy), (tx, ty)) pairs; every move must be accepted."""
    for (fx, fy), (tx, ty) in moves:
        accepted, notifications = session.attempt_move(Position(fx, fy), Position(tx, ty))
        assert accepted, notifications


# ---------------------------------------------------------------------------
# Flask application
# ---------------------------------------------------------------------------


def _drain_global_queue():
    while True:
        try:
            notification_queue.get_nowait()
        except queue.Empty:
            return


@pytest.fixture
def app_and_socketio(tmp_path):
    _drain_global_queue()
    sid_to_user_map.clear()

    app, socketio = create_app({
        'TESTING': True,
        'JWT_SECRET_KEY': 'test-secret-key-that-is-long-enough-for-hs256',
        'LOG_FILE': str(tmp_path / 'application.log'),
        'STATS_LOG_FILE': str(tmp_path / 'match_stats.log'),
        'START_BACKGROUND_WORKERS': False,
        'RATELIMIT_ENABLED': False,
    })
    yield app, socketio

    sid_to_user_map.clear()
    _drain_global_queue()


@pytest.fixture
def app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture
def socketio(app_and_socketio):
    return app_and_socketio[1]


@pytest.fixture
def http_client(app):
    return app.test_client()


@pytest.fixture
def connect(app, socketio):
    """Opens an authenticated Socket.IO test client for the given peer id."""
    clients = []

    def _connect(peer_id):
        with app.app_context():
            token = create_access_token(identity=peer_id)
        client = socketio.test_client(app, auth={'token': token})
        clients.append(client)
        return client

    yield _connect

    for client in clients:
        if client.is_connected():
            client.disconnect()


@pytest.fixture
def drain(app, socketio):
    """Runs the background worker's step for every queued message, synchronously."""

    def _drain():
        with app.app_context():
            while True:
                try:
                    msg = notification_queue.get_nowait()
                except queue.Empty:
                    return
                workers._process_notification(socketio, app.game_service, msg)

    return _drain

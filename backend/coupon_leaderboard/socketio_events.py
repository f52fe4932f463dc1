from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from coupon_leaderboard import socketio
from coupon_leaderboard.services.leaderboard.broadcaster import SOCKET_NAMESPACE, SOCKET_ROOM


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _broadcaster():
    return current_app.extensions['leaderboard'].broadcaster


def handle_connect():
    emit('connected', {'message': f'Connected to {SOCKET_NAMESPACE}'})


def handle_disconnect(reason=None):
    _broadcaster().detach_socket(_get_sid())


def handle_subscribe_leaderboard(data=None):
    join_room(SOCKET_ROOM)
    _broadcaster().attach_socket(_get_sid())
    emit('subscribed', {'room': SOCKET_ROOM})


def handle_unsubscribe_leaderboard(data=None):
    leave_room(SOCKET_ROOM)
    _broadcaster().detach_socket(_get_sid())
    emit('unsubscribed', {'room': SOCKET_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the leaderboard namespace."""
    socketio.on_event('connect', handle_connect, namespace=SOCKET_NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=SOCKET_NAMESPACE)
    socketio.on_event('subscribe_leaderboard', handle_subscribe_leaderboard, namespace=SOCKET_NAMESPACE)
    socketio.on_event('unsubscribe_leaderboard', handle_unsubscribe_leaderboard, namespace=SOCKET_NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=SOCKET_NAMESPACE)

import queue

from flask import Blueprint, Response, current_app

leaderboard_api = Blueprint('leaderboard_api', __name__)


def _format_event(message: str) -> str:
    return f"event: leaderboard\ndata: {message}\n\n"


@leaderboard_api.route('/stream', methods=['GET'])
def stream():
    """Server-sent events: one ``leaderboard`` event per published snapshot."""
    broadcaster = current_app.extensions['leaderboard'].broadcaster
    keepalive = float(current_app.config.get('SSE_KEEPALIVE_SEC', 15))
    # Subscribe before streaming so nothing published after the response starts is missed
    subscription = broadcaster.subscribe()

    def generate():
        while True:
            try:
                message = subscription.get(timeout=keepalive)
            except queue.Empty:
                yield ': keep-alive\n\n'
                continue
            yield _format_event(message)

    response = Response(
        generate(),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
    )
    # Runs on close even when the body is never iterated (HEAD, early disconnect)
    response.call_on_close(lambda: broadcaster.unsubscribe(subscription))
    return response

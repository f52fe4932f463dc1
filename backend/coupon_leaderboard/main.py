from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    leaderboard = current_app.extensions['leaderboard']
    return jsonify({
        'message': 'Coupon leaderboard server',
        'projection_mode': leaderboard.projection.mode,
        'subscribers': leaderboard.broadcaster.subscriber_count,
    })

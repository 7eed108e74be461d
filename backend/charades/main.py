import os

from flask import Blueprint, current_app, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from .models import AdminUser, Word
from .services.game.scoring import Difficulty
from .services.game.words import add_words

main = Blueprint('main', __name__)


@main.route('/')
def index():
    static_folder = current_app.static_folder
    if static_folder and os.path.isfile(os.path.join(static_folder, 'index.html')):
        return current_app.send_static_file('index.html')
    return jsonify({'message': 'Welcome to the charades game server!'})


@main.route('/admin/login', methods=['POST', 'OPTIONS'])
def admin_login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    user = AdminUser.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user)
        current_app.logger.info(f"[admin-login] user={user.username}")
        return jsonify({"success": True, "user": user.to_dict()})
    return jsonify({"success": False, "message": "Invalid credentials"}), 401


@main.route('/admin/logout', methods=['POST', 'OPTIONS'])
@login_required
def admin_logout():
    logout_user()
    return jsonify({"success": True})


@main.route('/admin/add-words', methods=['POST'])
@login_required
def admin_add_words():
    data = request.get_json(silent=True) or {}
    category = (data.get('category') or data.get('type') or '').strip()
    difficulty = data.get('difficulty')
    if not category:
        return jsonify({'error': 'Category is required'}), 400
    if difficulty not in [d.value for d in Difficulty]:
        return jsonify({'error': 'Difficulty must be Easy, Medium or Hard'}), 400
    count = add_words(category, difficulty, data.get('wordsRaw') or '')
    return jsonify({"success": True, "count": count})


@main.route('/admin/words', methods=['GET'])
@login_required
def admin_list_words():
    query = Word.query
    if request.args.get('category'):
        query = query.filter_by(category=request.args['category'])
    if request.args.get('difficulty'):
        query = query.filter_by(difficulty=request.args['difficulty'])
    return jsonify([w.to_dict() for w in query.order_by(Word.id).all()])


@main.route('/admin/me', methods=['GET'])
@login_required
def admin_me():
    return jsonify({"success": True, "user": current_user.to_dict()})

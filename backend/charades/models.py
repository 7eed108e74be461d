from charades import db, bcrypt
from flask_login import UserMixin


class AdminUser(UserMixin, db.Model):
    __tablename__ = 'admin_user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(128), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Word(db.Model):
    __tablename__ = 'word'
    id = db.Column(db.Integer, primary_key=True)
    word = db.Column(db.String(128), nullable=False)
    category = db.Column(db.String(64), nullable=False, index=True)
    difficulty = db.Column(db.String(16), nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'word': self.word,
            'category': self.category,
            'difficulty': self.difficulty,
        }


def ensure_admin_user(username, password):
    """Create the admin account, or reset its password if it already exists."""
    user = AdminUser.query.filter_by(username=username).first()
    if not user:
        user = AdminUser(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user

import logging
from dataclasses import dataclass
from typing import List, Optional

from charades import db
from charades.models import Word
from .scoring import Difficulty

logger = logging.getLogger(__name__)

# Requesting this category matches every category
ANY_CATEGORY = 'Both'

DEFAULT_WORDS = [
    ('Titanic', 'Movie', 'Easy'),
    ('Inception', 'Movie', 'Hard'),
    ('Frozen', 'Movie', 'Easy'),
    ('Bohemian Rhapsody', 'Song', 'Medium'),
    ('Thriller', 'Song', 'Easy'),
    ('Rap God', 'Song', 'Hard'),
    ('The Godfather', 'Movie', 'Medium'),
    ('Shape of You', 'Song', 'Easy'),
    ('Avatar', 'Movie', 'Easy'),
    ('Pulp Fiction', 'Movie', 'Medium'),
]


@dataclass(frozen=True)
class Term:
    word: str
    category: str
    difficulty: str

    def to_dict(self):
        return {'word': self.word, 'category': self.category, 'difficulty': self.difficulty}


class WordProvider:
    """Read side of the word table as the turn state machine sees it."""

    def select_term(self, category: str, difficulty: str) -> Optional[Term]:
        query = Word.query.filter_by(difficulty=difficulty)
        if category != ANY_CATEGORY:
            query = query.filter_by(category=category)
        row = query.order_by(db.func.random()).first()
        if row is None:
            return None
        return Term(word=row.word, category=row.category, difficulty=row.difficulty)

    def categories(self) -> List[str]:
        rows = db.session.query(Word.category).distinct().order_by(Word.category).all()
        return [r[0] for r in rows]

    def difficulties(self) -> List[str]:
        return [d.value for d in Difficulty]


def add_words(category: str, difficulty: str, words_raw: str) -> int:
    """Append every comma-separated term in ``words_raw``. Returns how many were added."""
    new_words = [w.strip() for w in (words_raw or '').split(',')]
    new_words = [w for w in new_words if w]
    for w in new_words:
        db.session.add(Word(word=w, category=category, difficulty=difficulty))
    db.session.commit()
    logger.info(f"[words-add] category={category} difficulty={difficulty} count={len(new_words)}")
    return len(new_words)


def seed_default_words() -> int:
    if Word.query.first() is not None:
        return 0
    for word, category, difficulty in DEFAULT_WORDS:
        db.session.add(Word(word=word, category=category, difficulty=difficulty))
    db.session.commit()
    return len(DEFAULT_WORDS)

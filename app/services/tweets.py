"""Persistence helpers for tweets."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.models.tweet import Tweet
from app.models.user import User
from app.schemas.tweet import TweetCreate, TweetUpdate

logger = logging.getLogger(__name__)


class TweetNotFoundError(Exception):
    """Raised when a tweet does not exist."""

    def __init__(self, tweet_id: int) -> None:
        super().__init__(f"Tweet '{tweet_id}' was not found")
        self.tweet_id = tweet_id


class TweetPermissionError(Exception):
    """Raised when a user tries to modify another user's tweet."""


class TweetPersistenceError(Exception):
    """Raised when a tweet could not be written."""


def get_tweet(db: Session, tweet_id: int) -> Optional[Tweet]:
    statement = select(Tweet).options(joinedload(Tweet.user)).where(Tweet.id == tweet_id)
    return db.execute(statement).scalar_one_or_none()


def get_tweet_or_raise(db: Session, tweet_id: int) -> Tweet:
    tweet = get_tweet(db, tweet_id)
    if tweet is None:
        raise TweetNotFoundError(tweet_id)
    return tweet


def list_tweets(db: Session) -> List[Tweet]:
    """Return every tweet with its author, newest first."""

    statement = (
        select(Tweet)
        .options(joinedload(Tweet.user))
        .order_by(Tweet.created_at.desc(), Tweet.id.desc())
    )
    return list(db.execute(statement).scalars())


def create_tweet(db: Session, author: User, tweet_in: TweetCreate) -> Tweet:
    tweet = Tweet(content=tweet_in.content, image=tweet_in.image, user_id=author.id)
    db.add(tweet)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise TweetPersistenceError("Failed to create the post.") from exc

    db.refresh(tweet)
    logger.info("User %s created tweet %s", author.id, tweet.id)
    return tweet


def _ensure_author(tweet: Tweet, actor: User) -> None:
    if tweet.user_id != actor.id:
        raise TweetPermissionError(f"User {actor.id} does not own tweet {tweet.id}")


def update_tweet(db: Session, tweet: Tweet, actor: User, update: TweetUpdate) -> Tweet:
    """Apply the fields present in ``update``. Only the author may edit."""

    _ensure_author(tweet, actor)
    for field, value in update.model_dump(exclude_unset=True).items():
        if field == "content" and value is None:
            continue
        setattr(tweet, field, value)

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise TweetPersistenceError("Failed to update the tweet.") from exc

    db.refresh(tweet)
    return tweet


def delete_tweet(db: Session, tweet: Tweet, actor: User) -> None:
    _ensure_author(tweet, actor)
    tweet_id = tweet.id
    db.delete(tweet)
    db.commit()
    logger.info("User %s deleted tweet %s", actor.id, tweet_id)


__all__ = [
    "TweetNotFoundError",
    "TweetPermissionError",
    "TweetPersistenceError",
    "create_tweet",
    "delete_tweet",
    "get_tweet",
    "get_tweet_or_raise",
    "list_tweets",
    "update_tweet",
]

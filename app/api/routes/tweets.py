"""Tweet CRUD routes. Every endpoint requires an authenticated user."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_db, require_authenticated_user
from app.core.errors import BadRequestError, ForbiddenError, NotFoundError
from app.models.tweet import Tweet
from app.models.user import User
from app.schemas.tweet import TweetCreate, TweetUpdate, TweetWithAuthor
from app.services.tweets import (
    TweetNotFoundError,
    TweetPermissionError,
    TweetPersistenceError,
    create_tweet,
    delete_tweet,
    get_tweet_or_raise,
    list_tweets,
    update_tweet,
)

router = APIRouter(tags=["tweets"], dependencies=[Depends(require_authenticated_user)])


def _load_tweet(db: Session, tweet_id: int) -> Tweet:
    try:
        return get_tweet_or_raise(db, tweet_id)
    except TweetNotFoundError as exc:
        raise NotFoundError("Tweet not found") from exc


@router.post("", response_model=TweetWithAuthor, status_code=status.HTTP_201_CREATED)
def post_tweet(
    payload: TweetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_authenticated_user),
) -> Tweet:
    if not payload.content:
        raise BadRequestError("You need to provide the tweet content")
    try:
        return create_tweet(db, current_user, payload)
    except TweetPersistenceError as exc:
        raise BadRequestError(str(exc)) from exc


@router.get("", response_model=List[TweetWithAuthor])
def read_tweets(db: Session = Depends(get_db)) -> List[Tweet]:
    return list_tweets(db)


@router.get("/{tweet_id}", response_model=TweetWithAuthor)
def read_tweet(tweet_id: int, db: Session = Depends(get_db)) -> Tweet:
    return _load_tweet(db, tweet_id)


@router.put("/{tweet_id}", response_model=TweetWithAuthor)
def edit_tweet(
    tweet_id: int,
    payload: TweetUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_authenticated_user),
) -> Tweet:
    tweet = _load_tweet(db, tweet_id)
    try:
        return update_tweet(db, tweet, current_user, payload)
    except TweetPermissionError as exc:
        raise ForbiddenError("You can only modify your own tweets.") from exc
    except TweetPersistenceError as exc:
        raise BadRequestError(str(exc)) from exc


@router.delete("/{tweet_id}")
def remove_tweet(
    tweet_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_authenticated_user),
) -> Response:
    tweet = _load_tweet(db, tweet_id)
    try:
        delete_tweet(db, tweet, current_user)
    except TweetPermissionError as exc:
        raise ForbiddenError("You can only delete your own tweets.") from exc
    return Response(status_code=status.HTTP_200_OK)


__all__ = ["router"]

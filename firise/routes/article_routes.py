from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from firise.config import API_PREFIX
from firise.database import get_storage
from firise.errors import internal_error
from firise.schemas import Article, ArticleCategory
from firise.services.storage import Storage

router = APIRouter(prefix=f"{API_PREFIX}/articles", tags=["Articles"])


@router.get("", response_model=list[Article])
def list_articles(category: Optional[ArticleCategory] = None, storage: Storage = Depends(get_storage)):
    try:
        return storage.get_articles(category)
    except Exception:
        raise internal_error("listing articles")


@router.get("/{article_id}", response_model=Article)
def get_article(article_id: int, storage: Storage = Depends(get_storage)):
    try:
        article = storage.get_article(article_id)
        if not article:
            raise HTTPException(status_code=404, detail="Article not found")
        return article
    except HTTPException:
        raise
    except Exception:
        raise internal_error(f"reading article {article_id}")

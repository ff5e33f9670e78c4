from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from catalog.api.forms import add_error, blank_form, handle_form, redirect_to
from catalog.api.listing import paginate
from catalog.core.auth import get_current_user
from catalog.core.database import get_db, transaction
from catalog.core.schemas import (
    AuthorOut,
    BookDetail,
    BookForm,
    BookOut,
    CommentOut,
    EditorOut,
    FormView,
    PageOut,
)
from catalog.core.statuses import BookStatus, list_statuses
from catalog.models import Book, User
from catalog.repositories import AuthorRepository, BookRepository, CommentRepository, EditorRepository
from catalog.security import (
    AccessDecisionManager,
    BookCreatorPolicy,
    deny_access_unless_granted,
    get_access_manager,
)
from catalog.security.roles import IS_AUTHENTICATED, ROLE_BOOK_CREATE, ROLE_BOOK_EDIT


logger = logging.getLogger(__name__)

router = APIRouter()


def _get_book_or_404(db: Session, book_id: int) -> Book:
    book = BookRepository(db).find(book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found.")
    return book


def _initial(book: Book) -> Dict[str, Any]:
    return {
        "title": book.title,
        "isbn": book.isbn,
        "cover": book.cover,
        "edited_at": book.edited_at,
        "plot": book.plot,
        "page_number": book.page_number,
        "status": book.status,
        "author_id": book.author_id,
        "editor_id": book.editor_id,
    }


# 表单里的作者 / 出版社必须存在，否则作为字段错误回显
def _check_relations(db: Session, form: BookForm, view: FormView) -> bool:
    if AuthorRepository(db).find(form.author_id) is None:
        add_error(view, "author_id", "Author not found.")
    if EditorRepository(db).find(form.editor_id) is None:
        add_error(view, "editor_id", "Editor not found.")
    return not view.errors


@router.get("", response_model=PageOut[BookOut], name="admin_book_index")
def list_books(
    page: int = Query(1, ge=1),
    status: BookStatus | None = Query(None),
    db: Session = Depends(get_db),
) -> PageOut[BookOut]:
    return paginate(db, BookRepository(db).latest(status=status), page, BookOut)


@router.get("/statuses")
def get_book_statuses() -> list[dict[str, str]]:
    return list(list_statuses(BookStatus))


# 当前用户创建的书
@router.get("/mine", response_model=PageOut[BookOut])
def list_my_books(
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
) -> PageOut[BookOut]:
    deny_access_unless_granted(access, user, IS_AUTHENTICATED)
    return paginate(db, BookRepository(db).created_by(user), page, BookOut)


@router.get("/new", response_model=FormView)
def new_book_form(
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
) -> FormView:
    deny_access_unless_granted(access, user, ROLE_BOOK_CREATE)
    return blank_form(BookForm, {"status": BookStatus.AVAILABLE})


@router.post("/new", response_model=FormView)
def create_book(
    request: Request,
    payload: Dict[str, Any] = Body(default_factory=dict),
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
):
    deny_access_unless_granted(access, user, ROLE_BOOK_CREATE)
    form, view = handle_form(BookForm, payload)
    if form is None or not _check_relations(db, form, view):
        return view
    book = Book(**form.model_dump(), created_by=user)
    with transaction(db):
        BookRepository(db).add(book)
    logger.info("Book %s created by user %s", book.id, user.id)
    return redirect_to(request, "admin_book_show", book_id=book.id)


@router.get("/{book_id}/edit", response_model=FormView)
def edit_book_form(
    book_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
) -> FormView:
    deny_access_unless_granted(access, user, ROLE_BOOK_EDIT)
    book = _get_book_or_404(db, book_id)
    deny_access_unless_granted(access, user, BookCreatorPolicy.IS_CREATOR, book)
    return blank_form(BookForm, _initial(book))


@router.post("/{book_id}/edit", response_model=FormView)
def update_book(
    request: Request,
    book_id: int,
    payload: Dict[str, Any] = Body(default_factory=dict),
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
):
    deny_access_unless_granted(access, user, ROLE_BOOK_EDIT)
    book = _get_book_or_404(db, book_id)
    deny_access_unless_granted(access, user, BookCreatorPolicy.IS_CREATOR, book)
    form, view = handle_form(BookForm, payload)
    if form is None or not _check_relations(db, form, view):
        return view
    with transaction(db):
        for key, value in form.model_dump().items():
            setattr(book, key, value)
    logger.info("Book %s edited by user %s", book.id, user.id)
    return redirect_to(request, "admin_book_show", book_id=book.id)


@router.post("/{book_id}/delete")
def delete_book(
    request: Request,
    book_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
):
    book = _get_book_or_404(db, book_id)
    deny_access_unless_granted(access, user, BookCreatorPolicy.IS_CREATOR, book)
    with transaction(db):
        BookRepository(db).remove(book)
    logger.info("Book %s deleted by user %s", book_id, user.id)
    return redirect_to(request, "admin_book_index")


@router.get("/{book_id}", response_model=BookDetail, name="admin_book_show")
def show_book(book_id: int, db: Session = Depends(get_db)) -> BookDetail:
    book = _get_book_or_404(db, book_id)
    comments = CommentRepository(db).for_book(book.id)
    return BookDetail(
        **BookOut.model_validate(book).model_dump(),
        author=AuthorOut.model_validate(book.author),
        editor=EditorOut.model_validate(book.editor),
        comments=[CommentOut.model_validate(comment) for comment in comments],
    )

import logging
from typing import Annotated, List, Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from idea_forum.config import get_settings
from idea_forum.db import get_session
from idea_forum.errors import ForumError, UnauthorizedError
from idea_forum.models import IdeaCategory, User
from idea_forum.repositories.users import get_user
from idea_forum.schemas import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    CommentCreate,
    CommentDelete,
    CommentOut,
    CommentUpdate,
    IdeaCard,
    IdeaCreate,
    IdeaDetail,
    IdeaPage,
    IdeaUpdate,
    IdeaVoteRequest,
    IdeaVoteResult,
    InterestCreate,
    InterestOut,
    InterestRemove,
    MyInterestOut,
    PostCard,
    PostCreate,
    PostDetail,
    PostOut,
    PostPage,
    PostVoteRequest,
    SuccessResponse,
    VoteResult,
)
from idea_forum.services import categories as category_service
from idea_forum.services import comments as comment_service
from idea_forum.services import ideas as idea_service
from idea_forum.services import posts as post_service


settings = get_settings()
app = FastAPI(title=settings.app_name)
logger = logging.getLogger("idea_forum.api")


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
    logger.info(
        "request.failed",
        extra={"path": request.url.path, "code": exc.code, "error": exc.message},
    )
    return JSONResponse(status_code=exc.status_code, content={"code": exc.code, "message": exc.message})


async def get_current_user(
    session: AsyncSession = Depends(get_session),
    user_id: Optional[int] = Header(default=None, alias=settings.auth_user_header),
) -> User:
    """Resolve the caller forwarded by the auth proxy to a stored user."""
    if user_id is None:
        raise UnauthorizedError("Authentication required")
    user = await get_user(session, user_id)
    if user is None:
        raise UnauthorizedError("Unknown user")
    return user


PageLimit = Annotated[int, Query(ge=1, le=settings.page_size_max)]


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# Ideas


@app.get("/api/idea.getAll", response_model=IdeaPage)
async def idea_get_all(
    session: AsyncSession = Depends(get_session),
    limit: PageLimit = settings.page_size_default,
    cursor: Optional[int] = None,
    category: Optional[IdeaCategory] = None,
    wants_team: Optional[bool] = None,
    search: Optional[str] = None,
) -> IdeaPage:
    return await idea_service.list_ideas(
        session,
        limit=limit,
        cursor=cursor,
        category=category,
        wants_team=wants_team,
        search=search,
    )


@app.get("/api/idea.getById", response_model=IdeaDetail)
async def idea_get_by_id(id: int, session: AsyncSession = Depends(get_session)) -> IdeaDetail:
    return await idea_service.get_idea(session, id)


@app.post("/api/idea.create", response_model=IdeaCard)
async def idea_create(
    req: IdeaCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> IdeaCard:
    return await idea_service.create_idea(session, req, author_id=user.id)


@app.post("/api/idea.update", response_model=IdeaCard)
async def idea_update(
    req: IdeaUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> IdeaCard:
    return await idea_service.update_idea(session, req, user_id=user.id)


@app.post("/api/idea.vote", response_model=IdeaVoteResult)
async def idea_vote(
    req: IdeaVoteRequest,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> IdeaVoteResult:
    return await idea_service.vote(session, req.idea_id, req.type, user_id=user.id)


@app.post("/api/idea.showInterest", response_model=InterestOut)
async def idea_show_interest(
    req: InterestCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> InterestOut:
    return await idea_service.show_interest(session, req.idea_id, user_id=user.id, message=req.message)


@app.post("/api/idea.removeInterest", response_model=SuccessResponse)
async def idea_remove_interest(
    req: InterestRemove,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> SuccessResponse:
    return await idea_service.remove_interest(session, req.idea_id, user_id=user.id)


@app.get("/api/idea.getInterestedUsers", response_model=List[InterestOut])
async def idea_get_interested_users(
    idea_id: int, session: AsyncSession = Depends(get_session)
) -> List[InterestOut]:
    return await idea_service.get_interested_users(session, idea_id)


@app.get("/api/idea.getMyIdeas", response_model=List[IdeaCard])
async def idea_get_my_ideas(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> List[IdeaCard]:
    return await idea_service.get_my_ideas(session, user_id=user.id)


@app.get("/api/idea.getMyInterests", response_model=List[MyInterestOut])
async def idea_get_my_interests(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> List[MyInterestOut]:
    return await idea_service.get_my_interests(session, user_id=user.id)


# Comments


@app.get("/api/comment.getByIdea", response_model=List[CommentOut])
async def comment_get_by_idea(idea_id: int, session: AsyncSession = Depends(get_session)) -> List[CommentOut]:
    return await comment_service.get_by_idea(session, idea_id)


@app.get("/api/comment.getById", response_model=CommentOut)
async def comment_get_by_id(id: int, session: AsyncSession = Depends(get_session)) -> CommentOut:
    return await comment_service.get_comment(session, id)


@app.post("/api/comment.create", response_model=CommentOut)
async def comment_create(
    req: CommentCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> CommentOut:
    return await comment_service.create_comment(
        session, req.idea_id, req.content, author_id=user.id, parent_id=req.parent_id
    )


@app.post("/api/comment.update", response_model=CommentOut)
async def comment_update(
    req: CommentUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> CommentOut:
    return await comment_service.update_comment(session, req.id, req.content, user_id=user.id)


@app.post("/api/comment.delete", response_model=SuccessResponse)
async def comment_delete(
    req: CommentDelete,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> SuccessResponse:
    return await comment_service.delete_comment(session, req.id, user_id=user.id)


# Categories


@app.get("/api/category.getAll", response_model=List[CategoryOut])
async def category_get_all(session: AsyncSession = Depends(get_session)) -> List[CategoryOut]:
    return await category_service.list_categories(session)


@app.get("/api/category.getBySlug", response_model=CategoryOut)
async def category_get_by_slug(slug: str, session: AsyncSession = Depends(get_session)) -> CategoryOut:
    return await category_service.get_by_slug(session, slug)


@app.post("/api/category.create", response_model=CategoryOut)
async def category_create(
    req: CategoryCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> CategoryOut:
    return await category_service.create_category(session, req, user_id=user.id)


@app.post("/api/category.update", response_model=CategoryOut)
async def category_update(
    req: CategoryUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> CategoryOut:
    return await category_service.update_category(session, req, user_id=user.id)


# Posts (legacy forum)


@app.get("/api/post.getAll", response_model=PostPage)
async def post_get_all(
    session: AsyncSession = Depends(get_session),
    limit: PageLimit = settings.page_size_default,
    cursor: Optional[int] = None,
    category_id: Optional[int] = None,
) -> PostPage:
    return await post_service.list_posts(session, limit=limit, cursor=cursor, category_id=category_id)


@app.get("/api/post.getBySlug", response_model=PostDetail)
async def post_get_by_slug(slug: str, session: AsyncSession = Depends(get_session)) -> PostDetail:
    return await post_service.get_by_slug(session, slug)


@app.post("/api/post.create", response_model=PostCard)
async def post_create(
    req: PostCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> PostCard:
    return await post_service.create_post(session, req, author_id=user.id)


@app.post("/api/post.vote", response_model=VoteResult)
async def post_vote(
    req: PostVoteRequest,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> VoteResult:
    return await post_service.vote(session, req.post_id, req.type, user_id=user.id)


@app.get("/api/post.getLatest", response_model=Optional[PostOut])
async def post_get_latest(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> Optional[PostOut]:
    return await post_service.get_latest(session, user_id=user.id)

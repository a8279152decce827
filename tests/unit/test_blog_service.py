# tests/unit/test_blog_service.py
from __future__ import annotations

import pytest

from blog_service.application.services import BlogService
from blog_service.domain.exceptions import (
    AuthError,
    DraftNotAccessibleError,
    NotFoundError,
    ValidationError,
)
from blog_service.domain.models import BlogQuery
from tests.fakes import blocks


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
async def author(user_repo):
    return await user_repo.create("Ann Author", "ann@x.com", "ann", "hash")


def published(**overrides):
    """Keyword arguments of a blog that passes publish validation."""
    data = {
        "title": "Hello World",
        "des": "A first post",
        "banner": "https://cdn/banner.jpeg",
        "tags": ["Intro", "Python"],
        "content": blocks("hello"),
        "draft": False,
    }
    data.update(overrides)
    return data


# ------------------------------ Creating ---------------------------------- #
async def test_create_published_blog(blog_service, blog_repo, user_repo, author):
    blog_id = await blog_service.create_blog(author.id, **published())

    blog = await blog_repo.find_by_blog_id(blog_id)
    assert blog.tags == ["intro", "python"]
    assert blog.author == author.id
    assert blog.draft is False
    assert user_repo.users[author.id].total_posts == 1
    assert user_repo.users[author.id].blogs == [blog.id]


async def test_blog_slug_from_title(blog_service, author):
    blog_id = await blog_service.create_blog(author.id, **published(title="  Hello, World!  "))

    assert blog_id.startswith("Hello-World")
    assert len(blog_id) == len("Hello-World") + 21


async def test_draft_bypasses_publish_validation(blog_service, blog_repo, user_repo, author):
    blog_id = await blog_service.create_blog(
        author.id, title="Just an idea", des="", banner="", tags=[], content={"blocks": []}, draft=True
    )

    blog = await blog_repo.find_by_blog_id(blog_id)
    assert blog.draft is True
    assert user_repo.users[author.id].total_posts == 0
    assert user_repo.users[author.id].blogs == [blog.id]


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"title": ""}, "Kindly provide the title as well"),
        ({"des": ""}, "Kindly provide the blog description as well"),
        ({"des": "x" * 201}, "Kindly provide the blog description as well"),
        ({"banner": ""}, "Kindly upload the suitable banner as well"),
        ({"content": {"blocks": []}}, "Content can't be empty"),
        ({"content": {}}, "Content can't be empty"),
        ({"tags": []}, "Provide the tags as well for better reach"),
        ({"tags": [f"t{i}" for i in range(11)]}, "Provide the tags as well for better reach"),
    ],
)
async def test_publish_validation(blog_service, blog_repo, author, overrides, message):
    with pytest.raises(ValidationError) as exc:
        await blog_service.create_blog(author.id, **published(**overrides))

    assert exc.value.message == message
    assert blog_repo.blogs == {}


async def test_draft_still_needs_title(blog_service, author):
    with pytest.raises(ValidationError):
        await blog_service.create_blog(author.id, title="", draft=True)


async def test_update_existing_blog_in_place(blog_service, blog_repo, user_repo, author):
    blog_id = await blog_service.create_blog(author.id, **published())

    same_id = await blog_service.create_blog(
        author.id, **published(title="Hello Again", tags=["News"]), blog_id=blog_id
    )

    assert same_id == blog_id
    assert len(blog_repo.blogs) == 1
    blog = await blog_repo.find_by_blog_id(blog_id)
    assert blog.title == "Hello Again"
    assert blog.tags == ["news"]
    assert user_repo.users[author.id].total_posts == 1


async def test_update_by_other_user_is_rejected(blog_service, user_repo, author):
    blog_id = await blog_service.create_blog(author.id, **published())
    intruder = await user_repo.create("Eve", "eve@x.com", "eve", "hash")

    with pytest.raises(AuthError):
        await blog_service.create_blog(intruder.id, **published(title="Mine now"), blog_id=blog_id)


async def test_update_unknown_blog(blog_service, author):
    with pytest.raises(NotFoundError):
        await blog_service.create_blog(author.id, **published(), blog_id="missing")


# ------------------------------- Reading ---------------------------------- #
async def test_get_blog_counts_reads(blog_service, blog_repo, user_repo, author):
    blog_id = await blog_service.create_blog(author.id, **published())

    blog = await blog_service.get_blog(blog_id)

    assert blog["blog_id"] == blog_id
    assert blog["author"]["personal_info"]["username"] == "ann"
    assert blog["activity"]["total_reads"] == 1
    assert user_repo.users[author.id].total_reads == 1


async def test_get_blog_in_edit_mode_does_not_count(blog_service, user_repo, author):
    blog_id = await blog_service.create_blog(author.id, **published())

    blog = await blog_service.get_blog(blog_id, mode="edit")

    assert blog["activity"]["total_reads"] == 0
    assert user_repo.users[author.id].total_reads == 0


async def test_get_draft_requires_draft_flag(blog_service, author):
    blog_id = await blog_service.create_blog(author.id, title="Idea", draft=True)

    with pytest.raises(DraftNotAccessibleError) as exc:
        await blog_service.get_blog(blog_id)
    assert exc.value.message == "Draft blogs are not accessible"
    assert exc.value.status_code == 500

    blog = await blog_service.get_blog(blog_id, draft=True, mode="edit")
    assert blog["draft"] is True


async def test_get_unknown_blog(blog_service):
    with pytest.raises(NotFoundError) as exc:
        await blog_service.get_blog("missing")
    assert exc.value.status_code == 404


# ------------------------------- Listing ---------------------------------- #
async def test_latest_blogs_paginates_newest_first(blog_service, author):
    ids = [await blog_service.create_blog(author.id, **published(title=f"Post {i}")) for i in range(7)]
    await blog_service.create_blog(author.id, title="Hidden draft", draft=True)

    first_page = await blog_service.latest_blogs(1)
    second_page = await blog_service.latest_blogs(2)

    assert [b["blog_id"] for b in first_page] == ids[::-1][:5]
    assert [b["blog_id"] for b in second_page] == ids[::-1][5:]
    assert await blog_service.latest_blogs_count() == 7


async def test_search_by_tag_excludes_current_blog(blog_service, author):
    current = await blog_service.create_blog(author.id, **published(tags=["python"]))
    other = await blog_service.create_blog(author.id, **published(title="Other", tags=["python"]))

    found = await blog_service.search_blogs(BlogQuery(tag="python", eliminate_blog=current), page=1, limit=5)

    assert [b["blog_id"] for b in found] == [other]
    assert await blog_service.search_blogs_count(BlogQuery(tag="python", eliminate_blog=current)) == 2


async def test_search_defaults_to_two_per_page(blog_service, author):
    for i in range(3):
        await blog_service.create_blog(author.id, **published(title=f"Python tips {i}"))

    assert len(await blog_service.search_blogs(BlogQuery(query="python"), page=1)) == 2
    assert len(await blog_service.search_blogs(BlogQuery(query="python"), page=2)) == 1


async def test_search_by_author(blog_service, user_repo, author):
    other = await user_repo.create("Bob", "bob@x.com", "bob", "hash")
    mine = await blog_service.create_blog(author.id, **published())
    await blog_service.create_blog(other.id, **published())

    found = await blog_service.search_blogs(BlogQuery(author=author.id), page=1, limit=10)
    assert [b["blog_id"] for b in found] == [mine]


async def test_trending_orders_by_reads(blog_service, author):
    quiet = await blog_service.create_blog(author.id, **published(title="Quiet"))
    popular = await blog_service.create_blog(author.id, **published(title="Popular"))
    for _ in range(3):
        await blog_service.get_blog(popular)

    trending = await blog_service.trending_blogs()
    assert [b["blog_id"] for b in trending] == [popular, quiet]


def test_make_blog_id_is_unique():
    assert BlogService.make_blog_id("Same title") != BlogService.make_blog_id("Same title")


# -------------------------------- Users ----------------------------------- #
async def test_get_profile(user_service, author):
    profile = await user_service.get_profile("ann")
    assert profile["personal_info"]["username"] == "ann"
    assert "password" not in profile["personal_info"]


async def test_get_profile_unknown(user_service):
    with pytest.raises(NotFoundError) as exc:
        await user_service.get_profile("ghost")
    assert exc.value.message == "User not found"


async def test_search_users(user_service, user_repo, author):
    await user_repo.create("Annabel", "annabel@x.com", "annabel", "hash")
    await user_repo.create("Bob", "bob@x.com", "bob", "hash")

    users = await user_service.search_users("ANN")
    assert sorted(u["personal_info"]["username"] for u in users) == ["ann", "annabel"]

"""Tests for board, card and social services."""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from commboard.api.deps import Services, build_services
from commboard.core.access import Actor
from commboard.core.config import Settings
from commboard.core.errors import (
    AuthenticationRequired,
    AuthorizationDenied,
    Conflict,
    LimitExceeded,
    NotFound,
    ValidationFailed,
)
from commboard.core.identity import IdentityError
from commboard.core.validation import MAX_CARD_POSITION
from commboard.db.models.card import Card
from commboard.db.repositories import BoardRepository, CardRepository, SettingsRepository


def card_payload(label: str, **extra):
    return {"label": label, "image_url": f"https://img.example.com/{label}.png", **extra}


class TestCreateBoard:
    @pytest.fixture
    def limited(self, settings: Settings, sessions, identity: AsyncMock) -> Services:
        return build_services(replace(settings, max_boards_override="3"), sessions, identity)

    @pytest.mark.asyncio
    async def test_creates_board_with_creator_info(self, services: Services, sessions):
        board = await services.boards.create_board(Actor(id="alice"), "Snacks", "Food words")

        assert board.user_id == "alice"
        assert board.is_public is False
        assert board.creator_name == "Alice Liddell"
        assert board.creator_image_url == "https://img.example.com/alice.png"
        stored = await BoardRepository(sessions).get(board.id)
        assert stored.name == "Snacks" and stored.description == "Food words"

    @pytest.mark.asyncio
    async def test_limit_boundary(self, limited: Services, seed_board, sessions):
        await seed_board("b1", "alice")
        await seed_board("b2", "alice")

        await limited.boards.create_board(Actor(id="alice"), "Third")
        assert await BoardRepository(sessions).count_for_user("alice") == 3

        with pytest.raises(LimitExceeded) as exc:
            await limited.boards.create_board(Actor(id="alice"), "Fourth")
        assert exc.value.limit == "max_boards_per_user"
        assert exc.value.maximum == 3
        assert await BoardRepository(sessions).count_for_user("alice") == 3

    @pytest.mark.asyncio
    async def test_limit_counts_only_own_boards(self, limited: Services, seed_board):
        for i in range(3):
            await seed_board(f"bob-{i}", "bob")
        board = await limited.boards.create_board(Actor(id="alice"), "Mine")
        assert board.user_id == "alice"

    @pytest.mark.asyncio
    async def test_stored_setting_limits_boards(self, services: Services, sessions, seed_board):
        await SettingsRepository(sessions).upsert("max_boards_per_user", "1")
        await seed_board("b1", "alice")

        with pytest.raises(LimitExceeded):
            await services.boards.create_board(Actor(id="alice"), "Second")

    @pytest.mark.asyncio
    async def test_limit_checked_before_validation(self, limited: Services, seed_board):
        for i in range(3):
            await seed_board(f"b{i}", "alice")
        with pytest.raises(LimitExceeded):
            await limited.boards.create_board(Actor(id="alice"), "")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name, description, field",
        [
            (None, None, "name"),
            ("   ", None, "name"),
            ("x" * 101, None, "name"),
            ("ok", "d" * 501, "description"),
        ],
    )
    async def test_validation(self, services: Services, name, description, field):
        with pytest.raises(ValidationFailed) as exc:
            await services.boards.create_board(Actor(id="alice"), name, description)
        assert exc.value.field == field

    @pytest.mark.asyncio
    async def test_length_limits_are_inclusive(self, services: Services):
        board = await services.boards.create_board(Actor(id="alice"), "n" * 100, "d" * 500)
        assert len(board.name) == 100

    @pytest.mark.asyncio
    async def test_enrichment_failure_does_not_block_creation(
        self, services: Services, identity: AsyncMock
    ):
        identity.get_user.side_effect = IdentityError("provider down")

        board = await services.boards.create_board(Actor(id="alice"), "Still works")

        assert board.creator_name is None
        assert board.creator_image_url is None

    @pytest.mark.asyncio
    async def test_unexpected_enrichment_error_is_swallowed(
        self, services: Services, identity: AsyncMock
    ):
        identity.get_user.side_effect = ValueError("bad payload")
        board = await services.boards.create_board(Actor(id="alice"), "Still works")
        assert board.creator_name is None

    @pytest.mark.asyncio
    async def test_anonymous_rejected(self, services: Services):
        with pytest.raises(AuthenticationRequired):
            await services.boards.create_board(Actor(id=None), "Nope")


class TestListing:
    @pytest.mark.asyncio
    async def test_list_boards_returns_only_own(self, services: Services, seed_board):
        await seed_board("a1", "alice")
        await seed_board("a2", "alice", is_public=True)
        await seed_board("b1", "bob", is_public=True)

        boards = await services.boards.list_boards(Actor(id="alice"))

        assert {b.id for b in boards} == {"a1", "a2"}

    @pytest.mark.asyncio
    async def test_public_boards_with_counts(self, services: Services, seed_board):
        await seed_board("a1", "alice", is_public=True, n_cards=3)
        await seed_board("a2", "alice")
        await seed_board("b1", "bob", is_public=True)
        await services.social.like(Actor(id="bob"), "a1")
        await services.social.add_comment(Actor(id="bob"), "a1", "Lovely")

        entries = await services.boards.list_public_boards(Actor(id="bob"))
        by_id = {e["board"].id: e for e in entries}

        assert set(by_id) == {"a1", "b1"}
        assert by_id["a1"]["card_count"] == 3
        assert by_id["a1"]["like_count"] == 1
        assert by_id["a1"]["comment_count"] == 1
        assert by_id["a1"]["is_liked_by_user"] is True
        assert by_id["b1"]["is_liked_by_user"] is False

    @pytest.mark.asyncio
    async def test_public_boards_for_anonymous(self, services: Services, seed_board):
        await seed_board("a1", "alice", is_public=True)
        entries = await services.boards.list_public_boards(Actor(id=None))
        assert [e["is_liked_by_user"] for e in entries] == [False]

    @pytest.mark.asyncio
    async def test_get_board_respects_visibility(self, services: Services, seed_board):
        await seed_board("private", "alice")

        assert (await services.boards.get_board(Actor(id="alice"), "private")).id == "private"
        with pytest.raises(AuthorizationDenied):
            await services.boards.get_board(Actor(id="bob"), "private")
        with pytest.raises(NotFound):
            await services.boards.get_board(Actor(id="alice"), "missing")


class TestUpdateDeleteClone:
    @pytest.mark.asyncio
    async def test_owner_updates_board(self, services: Services, seed_board):
        await seed_board("b1", "alice")
        board = await services.boards.update_board(Actor(id="alice"), "b1", name="Renamed", is_public=True)
        assert board.name == "Renamed" and board.is_public is True

    @pytest.mark.asyncio
    async def test_non_owner_update_denied_like_missing(self, services: Services, seed_board):
        await seed_board("b1", "alice")
        with pytest.raises(AuthorizationDenied) as denied:
            await services.boards.update_board(Actor(id="bob"), "b1", name="Mine now")
        with pytest.raises(AuthorizationDenied) as missing:
            await services.boards.update_board(Actor(id="bob"), "ghost", name="Mine now")
        assert denied.value.message == missing.value.message

    @pytest.mark.asyncio
    async def test_template_board_cannot_be_deleted(self, services: Services, seed_board, sessions):
        await seed_board("starter-basics", "alice", is_public=True)
        with pytest.raises(AuthorizationDenied):
            await services.boards.delete_board(Actor(id="alice"), "starter-basics")
        assert await BoardRepository(sessions).get("starter-basics") is not None

    @pytest.mark.asyncio
    async def test_delete_removes_cards(self, services: Services, seed_board, sessions):
        await seed_board("b1", "alice", n_cards=2)
        await services.boards.delete_board(Actor(id="alice"), "b1")

        assert await BoardRepository(sessions).get("b1") is None
        assert await CardRepository(sessions).count_for_board("b1") == 0

    @pytest.mark.asyncio
    async def test_clone_template_copies_cards(self, services: Services, seed_board, sessions):
        await seed_board("starter-basics", "system", is_public=True, n_cards=3, name="Basics")

        board, count = await services.boards.clone_board(Actor(id="alice"), "starter-basics", "My basics")

        assert count == 3
        assert board.user_id == "alice" and board.is_public is False
        assert board.description == "Based on Basics"
        copies = await CardRepository(sessions).list_for_board(board.id)
        assert [c.label for c in copies] == ["word 0", "word 1", "word 2"]
        assert all(not c.id.startswith("starter-basics") for c in copies)

    @pytest.mark.asyncio
    async def test_clone_private_board_of_someone_else_is_not_found(
        self, services: Services, seed_board
    ):
        await seed_board("b1", "bob")
        with pytest.raises(NotFound):
            await services.boards.clone_board(Actor(id="alice"), "b1", "Copy")


class TestCards:
    @pytest.fixture
    def small(self, settings: Settings, sessions, identity: AsyncMock) -> Services:
        return build_services(replace(settings, max_cards_override="3"), sessions, identity)

    @pytest.mark.asyncio
    async def test_cards_appended_after_last_position(self, services: Services, seed_board):
        await seed_board("b1", "alice", n_cards=2)
        created = await services.cards.create_cards(Actor(id="alice"), "b1", [card_payload("apple")])
        assert created[0].order == 2
        assert created[0].color == "#6366f1"

    @pytest.mark.asyncio
    async def test_append_past_last_storable_position_rejected(
        self, services: Services, seed_board, sessions
    ):
        _, cards = await seed_board("b1", "alice", n_cards=1)
        await CardRepository(sessions).apply_positions("b1", {cards[0].id: MAX_CARD_POSITION})

        with pytest.raises(ValidationFailed, match="No room"):
            await services.cards.create_cards(Actor(id="alice"), "b1", [card_payload("apple")])
        assert await CardRepository(sessions).count_for_board("b1") == 1

    @pytest.mark.asyncio
    async def test_card_limit(self, small: Services, seed_board):
        await seed_board("b1", "alice", n_cards=2)

        await small.cards.create_cards(Actor(id="alice"), "b1", [card_payload("apple")])
        with pytest.raises(LimitExceeded) as exc:
            await small.cards.create_cards(Actor(id="alice"), "b1", [card_payload("pear")])
        assert exc.value.limit == "max_cards_per_board"
        assert exc.value.maximum == 3

    @pytest.mark.asyncio
    async def test_batch_over_limit_writes_nothing(self, small: Services, seed_board, sessions):
        await seed_board("b1", "alice", n_cards=1)
        with pytest.raises(LimitExceeded):
            await small.cards.create_cards(
                Actor(id="alice"), "b1", [card_payload("a"), card_payload("b"), card_payload("c")]
            )
        assert await CardRepository(sessions).count_for_board("b1") == 1

    @pytest.mark.asyncio
    async def test_duplicate_label_conflicts(self, services: Services, seed_board):
        await seed_board("b1", "alice", n_cards=1)
        with pytest.raises(Conflict):
            await services.cards.create_cards(Actor(id="alice"), "b1", [card_payload(" WORD 0 ")])

    @pytest.mark.asyncio
    async def test_invalid_color(self, services: Services, seed_board):
        await seed_board("b1", "alice")
        with pytest.raises(ValidationFailed) as exc:
            await services.cards.create_cards(Actor(id="alice"), "b1", [card_payload("a", color="red")])
        assert exc.value.field == "color"

    @pytest.mark.asyncio
    async def test_non_owner_cannot_add_cards(self, services: Services, seed_board):
        await seed_board("b1", "alice", is_public=True)
        with pytest.raises(AuthorizationDenied):
            await services.cards.create_cards(Actor(id="bob"), "b1", [card_payload("a")])

    @pytest.mark.asyncio
    async def test_update_normalizes_category(self, services: Services, seed_board):
        _, cards = await seed_board("b1", "alice", n_cards=1)
        card = await services.cards.update_card(Actor(id="alice"), cards[0].id, {"category": "  fOOD "})
        assert card.category == "Food"

    @pytest.mark.asyncio
    async def test_template_card_cannot_be_edited_or_deleted(self, services: Services, seed_board):
        _, cards = await seed_board("b1", "alice", n_cards=1, card_prefix="sbp-fruit")
        with pytest.raises(AuthorizationDenied, match="Template cards cannot be modified"):
            await services.cards.update_card(Actor(id="alice"), cards[0].id, {"label": "x"})
        with pytest.raises(AuthorizationDenied, match="Template cards cannot be deleted"):
            await services.cards.delete_card(Actor(id="alice"), cards[0].id)

    @pytest.mark.asyncio
    async def test_inherited_card_can_move_but_not_change(
        self, services: Services, seed_board, sessions
    ):
        await seed_board("b1", "alice")
        await seed_board("b2", "alice", n_cards=2)
        await CardRepository(sessions).add_many(
            [Card(id="inh", board_id="b1", order=0, label="hello", source_board_id="pub")]
        )

        with pytest.raises(AuthorizationDenied, match="Inherited cards"):
            await services.cards.update_card(Actor(id="alice"), "inh", {"label": "bye"})

        moved = await services.cards.update_card(Actor(id="alice"), "inh", {"board_id": "b2", "label": "hello"})
        assert moved.board_id == "b2"
        assert moved.order == 2

    @pytest.mark.asyncio
    async def test_move_requires_rights_on_destination(self, services: Services, seed_board):
        _, cards = await seed_board("b1", "alice", n_cards=1)
        await seed_board("b2", "bob")
        with pytest.raises(AuthorizationDenied, match="destination"):
            await services.cards.update_card(Actor(id="alice"), cards[0].id, {"board_id": "b2"})

    @pytest.mark.asyncio
    async def test_missing_card_is_not_found(self, services: Services):
        with pytest.raises(NotFound):
            await services.cards.delete_card(Actor(id="alice"), "ghost")

    @pytest.mark.asyncio
    async def test_list_cards_hidden_for_private_board(self, services: Services, seed_board):
        await seed_board("b1", "alice", n_cards=2)
        assert len(await services.cards.list_cards(Actor(id="alice"), "b1")) == 2
        with pytest.raises(AuthorizationDenied):
            await services.cards.list_cards(Actor(id="bob"), "b1")


class TestComments:
    @pytest.mark.asyncio
    async def test_comment_uses_profile_name(self, services: Services, seed_board):
        await seed_board("b1", "alice", is_public=True)
        comment = await services.social.add_comment(Actor(id="bob"), "b1", "  Nice board  ")
        assert comment.content == "Nice board"
        assert comment.commenter_name == "Bob Builder"

    @pytest.mark.asyncio
    async def test_only_author_edits(self, services: Services, seed_board):
        await seed_board("b1", "alice", is_public=True)
        comment = await services.social.add_comment(Actor(id="bob"), "b1", "first")

        with pytest.raises(NotFound):
            await services.social.update_comment(Actor(id="alice"), comment.id, "hijack")
        edited = await services.social.update_comment(Actor(id="bob"), comment.id, "second")
        assert edited.content == "second" and edited.is_edited is True

    @pytest.mark.asyncio
    async def test_private_board_comments_hidden(self, services: Services, seed_board):
        await seed_board("b1", "alice")
        with pytest.raises(NotFound):
            await services.social.add_comment(Actor(id="bob"), "b1", "hello?")

    @pytest.mark.asyncio
    async def test_empty_comment_rejected(self, services: Services, seed_board):
        await seed_board("b1", "alice", is_public=True)
        with pytest.raises(ValidationFailed):
            await services.social.add_comment(Actor(id="alice"), "b1", "   ")

    @pytest.mark.asyncio
    async def test_like_is_idempotent(self, services: Services, seed_board):
        await seed_board("b1", "alice", is_public=True)
        await services.social.like(Actor(id="bob"), "b1")
        liked, count = await services.social.like(Actor(id="bob"), "b1")
        assert (liked, count) == (True, 1)

        liked, count = await services.social.unlike(Actor(id="bob"), "b1")
        assert (liked, count) == (False, 0)

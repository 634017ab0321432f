"""
Unit tests for the user service and API key helpers.
"""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from api.auth import APIKeyManager


class TestAPIKeyManager:
    """Test cases for API key generation and hashing."""

    def test_generated_keys_are_prefixed_and_unique(self):
        first = APIKeyManager.generate_api_key()
        second = APIKeyManager.generate_api_key()

        assert first.startswith("bk_")
        assert first != second

    def test_hash_is_stable_sha256(self):
        digest = APIKeyManager.hash_api_key("bk_test")

        assert digest == APIKeyManager.hash_api_key("bk_test")
        assert len(digest) == 64
        assert digest != APIKeyManager.hash_api_key("bk_other")

    def test_mask_hides_key(self):
        assert APIKeyManager.mask_api_key("bk_abcdefghijklmnop") == "bk_abcdefg..."


class TestUserService:
    """Test cases for UserService."""

    @pytest.mark.asyncio
    async def test_find_by_api_key_looks_up_hash(self, user_service, mock_collection):
        """Test that keys are matched by hash, never in plaintext."""
        user_id = ObjectId()
        mock_collection.find_one.return_value = {
            "_id": user_id,
            "name": "Ghulam",
            "email": "ghulam@example.com",
            "api_key_hash": APIKeyManager.hash_api_key("bk_secret"),
        }

        user = await user_service.find_by_api_key("bk_secret")

        mock_collection.find_one.assert_awaited_once_with(
            {"api_key_hash": APIKeyManager.hash_api_key("bk_secret")}
        )
        assert user.id == str(user_id)
        assert user.email == "ghulam@example.com"

    @pytest.mark.asyncio
    async def test_find_by_unknown_api_key(self, user_service, mock_collection):
        mock_collection.find_one.return_value = None

        assert await user_service.find_by_api_key("bk_unknown") is None

    @pytest.mark.asyncio
    async def test_create_user_stores_only_hash(self, user_service, mock_collection):
        """Test that the plaintext key is returned but not stored."""
        new_id = ObjectId()
        mock_collection.insert_one.return_value = MagicMock(inserted_id=new_id)

        created = await user_service.create_user("Ghulam", "ghulam@example.com")

        stored = mock_collection.insert_one.call_args.args[0]
        assert stored["api_key_hash"] == APIKeyManager.hash_api_key(created.api_key)
        assert created.api_key not in stored.values()
        assert created.user.id == str(new_id)
        assert created.user.name == "Ghulam"

    @pytest.mark.asyncio
    async def test_list_users_excludes_key_material(self, user_service, mock_collection, mock_cursor):
        mock_cursor.to_list.return_value = [
            {"_id": ObjectId(), "name": "A", "email": "a@example.com"},
            {"_id": ObjectId(), "name": "B", "email": "b@example.com"},
        ]

        users = await user_service.list_users()

        mock_collection.find.assert_called_once_with({}, {"api_key_hash": 0})
        assert [user.name for user in users] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_ensure_indexes(self, user_service, mock_collection):
        await user_service.ensure_indexes()

        mock_collection.create_index.assert_any_await("api_key_hash", unique=True)
        mock_collection.create_index.assert_any_await("email", unique=True)

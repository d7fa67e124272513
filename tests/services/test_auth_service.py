"""
Auth Service Tests
==================

Token resolution and the two distinct rejection reasons.
"""

import pytest

from groupchat.core.exceptions import Unauthenticated


class TestAuthenticate:

    def test_valid_token_resolves_user(self, auth_service, user_service):
        user = user_service.register("alice")

        assert auth_service.authenticate(user.api_token) == user

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_missing_token(self, auth_service, token):
        with pytest.raises(Unauthenticated) as exc_info:
            auth_service.authenticate(token)

        assert exc_info.value.reason == Unauthenticated.MISSING_TOKEN
        assert exc_info.value.message == "Authentication required"

    def test_unknown_token(self, auth_service, user_service):
        user_service.register("alice")

        with pytest.raises(Unauthenticated) as exc_info:
            auth_service.authenticate("f" * 32)

        assert exc_info.value.reason == Unauthenticated.INVALID_TOKEN
        assert exc_info.value.message == "Invalid API token"

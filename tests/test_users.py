"""
Profile and profile picture tests.
"""
from pathlib import Path

import pytest

from marketplace.services.upload_service import PUBLIC_PREFIX, build_filename

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def upload(client, user_id, headers, content=PNG_BYTES, filename="me.png", content_type="image/png"):
    return client.post(
        f"/api/users/{user_id}/avatar",
        files={"profilePicture": (filename, content, content_type)},
        headers=headers,
    )


class TestProfile:
    def test_public_profile_lists_active_listings_only(self, client, make_user, make_listing):
        user = make_user("alice", location="Berlin")
        active = make_listing(user, minutes=1)
        make_listing(user, minutes=2, status="sold")

        response = client.get(f"/api/users/{user.id}")
        assert response.status_code == 200
        profile = response.json()["user"]
        assert profile["username"] == "alice"
        assert profile["location"] == "Berlin"
        assert "email" not in profile
        assert "passwordHash" not in profile
        assert [listing["id"] for listing in profile["listings"]] == [active.id]

    def test_unknown_user(self, client):
        response = client.get("/api/users/missing")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "USER_NOT_FOUND"


class TestProfileUpdate:
    def test_owner_updates_fields(self, client, make_user, auth_headers):
        user = make_user("alice")
        response = client.patch(
            f"/api/users/{user.id}",
            json={"username": "alice_b", "location": "Hamburg", "profilePicture": "https://img.example.com/a.png"},
            headers=auth_headers(user),
        )
        assert response.status_code == 200
        profile = response.json()["user"]
        assert profile["username"] == "alice_b"
        assert profile["location"] == "Hamburg"
        assert profile["profilePicture"] == "https://img.example.com/a.png"

    def test_blank_values_clear(self, client, make_user, auth_headers):
        user = make_user("alice", location="Berlin", profile_picture="https://img.example.com/a.png")
        response = client.patch(
            f"/api/users/{user.id}",
            json={"location": "  ", "profilePicture": ""},
            headers=auth_headers(user),
        )
        profile = response.json()["user"]
        assert profile["location"] is None
        assert profile["profilePicture"] is None

    def test_cannot_update_someone_else(self, client, make_user, auth_headers):
        alice, bob = make_user("alice"), make_user("bob")
        response = client.patch(f"/api/users/{alice.id}", json={"location": "x"}, headers=auth_headers(bob))
        assert response.status_code == 403

    def test_empty_update(self, client, make_user, auth_headers):
        user = make_user("alice")
        response = client.patch(f"/api/users/{user.id}", json={}, headers=auth_headers(user))
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "NO_UPDATE_DATA"

    def test_username_taken(self, client, make_user, auth_headers):
        alice = make_user("alice")
        make_user("bob")
        response = client.patch(f"/api/users/{alice.id}", json={"username": "bob"}, headers=auth_headers(alice))
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "USERNAME_TAKEN"

    @pytest.mark.parametrize(
        "body",
        [{"username": None}, {"username": "a b"}, {"profilePicture": "ftp://img.example.com/a.png"}],
    )
    def test_invalid_values(self, client, make_user, auth_headers, body):
        user = make_user("alice")
        response = client.patch(f"/api/users/{user.id}", json=body, headers=auth_headers(user))
        assert response.status_code == 422


class TestAvatarUpload:
    def test_upload_stores_file_and_points_profile_at_it(self, client, settings, make_user, auth_headers):
        user = make_user("alice")
        response = upload(client, user.id, auth_headers(user))
        assert response.status_code == 200

        url = response.json()["profilePicture"]
        assert url.startswith(PUBLIC_PREFIX)
        assert url.endswith(".png")
        stored = Path(settings.upload_dir) / "profile-pictures" / url[len(PUBLIC_PREFIX):]
        assert stored.read_bytes() == PNG_BYTES
        assert response.json()["user"]["profilePicture"] == url

    def test_replacing_removes_previous_file(self, client, settings, make_user, auth_headers):
        user = make_user("alice")
        first = upload(client, user.id, auth_headers(user)).json()["profilePicture"]
        second = upload(client, user.id, auth_headers(user), filename="me.jpg", content_type="image/jpeg").json()["profilePicture"]

        folder = Path(settings.upload_dir) / "profile-pictures"
        assert not (folder / first[len(PUBLIC_PREFIX):]).exists()
        assert (folder / second[len(PUBLIC_PREFIX):]).exists()

    def test_rejects_non_image(self, client, make_user, auth_headers):
        user = make_user("alice")
        response = upload(client, user.id, auth_headers(user), content=b"%PDF", filename="cv.pdf", content_type="application/pdf")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_FILE_TYPE"

    def test_rejects_oversize_file(self, client, settings, make_user, auth_headers):
        user = make_user("alice")
        response = upload(client, user.id, auth_headers(user), content=b"\x00" * (settings.max_upload_bytes + 1))
        assert response.status_code == 413
        assert response.json()["error"]["code"] == "FILE_TOO_LARGE"

    def test_cannot_upload_for_someone_else(self, client, make_user, auth_headers):
        alice, bob = make_user("alice"), make_user("bob")
        response = upload(client, alice.id, auth_headers(bob))
        assert response.status_code == 403

    def test_filename_ignores_non_image_extension(self):
        name = build_filename("u1", "evil.php", "image/png")
        assert name.startswith("u1-")
        assert name.endswith(".png")

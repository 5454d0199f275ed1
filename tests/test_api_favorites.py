"""HTTP: /api/favorites routes."""

import pytest

from conftest import register


@pytest.fixture
def logged_in(client):
    register(client)
    return client


class TestFavoritesApi:

    @pytest.mark.parametrize("method, path", [
        ("get", "/api/favorites"),
        ("post", "/api/favorites"),
        ("delete", "/api/favorites/3498"),
    ])
    def test_requires_session(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 401
        assert "Non sei autenticato" in response.json()["message"]

    def test_add_list_remove(self, logged_in):
        response = logged_in.post("/api/favorites", json={
            "gameId": 3498,
            "gameName": "Grand Theft Auto V",
            "gameImage": "https://media.rawg.io/gta5.jpg",
        })

        assert response.status_code == 201
        favorite = response.json()
        assert favorite["id"] == 1
        assert favorite["userId"] == 1
        assert favorite["gameId"] == 3498
        assert favorite["gameName"] == "Grand Theft Auto V"
        assert favorite["gameImage"] == "https://media.rawg.io/gta5.jpg"
        assert "addedAt" in favorite

        listing = logged_in.get("/api/favorites")
        assert listing.status_code == 200
        assert [f["gameId"] for f in listing.json()] == [3498]
        assert logged_in.get("/api/auth/user").json()["favoriteGames"] == [3498]

        removed = logged_in.delete("/api/favorites/3498")
        assert removed.status_code == 200
        assert removed.json() == {"message": "Preferito rimosso con successo"}
        assert logged_in.get("/api/favorites").json() == []
        assert logged_in.get("/api/auth/user").json()["favoriteGames"] == []

        again = logged_in.delete("/api/favorites/3498")
        assert again.status_code == 404
        assert again.json() == {"message": "Preferito non trovato"}

    def test_empty_list(self, logged_in):
        assert logged_in.get("/api/favorites").json() == []

    def test_image_is_optional(self, logged_in):
        response = logged_in.post("/api/favorites", json={"gameId": 28, "gameName": "RDR2"})

        assert response.status_code == 201
        assert response.json()["gameImage"] is None

    def test_invalid_body(self, logged_in):
        response = logged_in.post("/api/favorites", json={"gameName": "No id"})

        assert response.status_code == 400
        assert "errors" in response.json()

    def test_favorites_are_private(self, client):
        register(client)
        client.post("/api/favorites", json={"gameId": 1, "gameName": "A"})
        client.get("/api/auth/logout")

        register(client, email="luigi@nintendo.it", username="luigi")
        assert client.get("/api/favorites").json() == []
        assert client.delete("/api/favorites/1").status_code == 404

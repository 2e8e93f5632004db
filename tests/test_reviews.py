import pytest

from services import ReviewService


@pytest.mark.unit
def test_reviews_are_scoped_to_product(db):
    service = ReviewService(db)
    service.create_review("Great fit", "p1", "ada")
    service.create_review("Runs small", "p1", "grace")
    service.create_review("Nice cap", "p2", "ada")

    reviews = service.list_reviews("p1")

    assert [r["review"] for r in reviews] == ["Great fit", "Runs small"]
    assert service.list_reviews("p3") == []


@pytest.mark.integration
class TestReviewRoutes:
    def test_post_review(self, client):
        response = client.post(
            "/api/v1/reviews",
            json={"review": "Great fit", "productId": "p1", "userName": "ada"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Review posted successfully"
        assert body["data"]["insertedId"]

    def test_post_review_requires_product_id(self, client):
        response = client.post("/api/v1/reviews", json={"review": "Great fit", "userName": "ada"})

        assert response.status_code == 400
        assert "productId" in response.json()["error"]

    def test_list_reviews_answers_201(self, client):
        client.post("/api/v1/reviews", json={"review": "Great fit", "productId": "p1", "userName": "ada"})

        response = client.get("/api/v1/reviews/p1")

        assert response.status_code == 201
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["userName"] == "ada"
        assert data[0]["productId"] == "p1"

"""
Tests for Reviews

Tests the review lifecycle under /api/v1/reviews:
- Create a review (authenticated)
- Get a single review
- Update / delete a review (author only)
- List reviews of a company and of a user

Business Rules:
- One review per user per company
- Rating is a whole number 1-5, comment 10-1000 characters
- Only the review author can update or delete
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from reviewhub.exceptions import ConflictError, ValidationError
from reviewhub.models import Review
from reviewhub.schemas.review import ReviewCreate, ReviewUpdate
from reviewhub.services import reviews as review_service


def review_payload(company_id: int, **overrides) -> dict:
    payload = {
        "company_id": company_id,
        "rating": 5,
        "title": "Great support",
        "comment": "They fixed my issue within the hour.",
    }
    payload.update(overrides)
    return payload


# =============================================================================
# Create
# =============================================================================


class TestCreateReview:
    """Tests for POST /api/v1/reviews"""

    def test_create(self, client: TestClient, sample_company, sample_user, auth_headers: dict):
        response = client.post(
            "/api/v1/reviews", headers=auth_headers, json=review_payload(sample_company.id)
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["rating"] == 5
        assert data["title"] == "Great support"
        assert data["user"]["id"] == sample_user.id
        assert data["user"]["name"] == "Test User"
        assert "email" not in data["user"]
        assert data["company"]["slug"] == "acme"
        assert data["company"]["category"]["slug"] == "technology"

    def test_blank_title_defaults(self, client: TestClient, sample_company, auth_headers: dict):
        response = client.post(
            "/api/v1/reviews",
            headers=auth_headers,
            json=review_payload(sample_company.id, title="   "),
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["title"] == "Review"

    def test_missing_title_defaults(self, client: TestClient, sample_company, auth_headers: dict):
        payload = review_payload(sample_company.id)
        del payload["title"]

        response = client.post("/api/v1/reviews", headers=auth_headers, json=payload)

        assert response.json()["title"] == "Review"

    def test_comment_is_trimmed(self, client: TestClient, sample_company, auth_headers: dict):
        response = client.post(
            "/api/v1/reviews",
            headers=auth_headers,
            json=review_payload(sample_company.id, comment="   Ten chars!   "),
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["comment"] == "Ten chars!"

    @pytest.mark.parametrize("rating", [0, 6, 4.5, "5"])
    def test_invalid_rating(
        self, client: TestClient, sample_company, auth_headers: dict, rating
    ):
        response = client.post(
            "/api/v1/reviews",
            headers=auth_headers,
            json=review_payload(sample_company.id, rating=rating),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "error" in response.json()

    def test_comment_too_short_after_trim(
        self, client: TestClient, sample_company, auth_headers: dict
    ):
        response = client.post(
            "/api/v1/reviews",
            headers=auth_headers,
            json=review_payload(sample_company.id, comment="   short    "),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_comment_too_long(self, client: TestClient, sample_company, auth_headers: dict):
        response = client.post(
            "/api/v1/reviews",
            headers=auth_headers,
            json=review_payload(sample_company.id, comment="x" * 1001),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_company(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/reviews", headers=auth_headers, json=review_payload(99999)
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Company not found"}

    def test_second_review_conflicts(
        self,
        client: TestClient,
        db_session: Session,
        sample_company,
        sample_review,
        auth_headers: dict,
    ):
        response = client.post(
            "/api/v1/reviews", headers=auth_headers, json=review_payload(sample_company.id)
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {"error": "You have already reviewed this company"}
        count = db_session.execute(
            select(func.count(Review.id)).where(Review.company_id == sample_company.id)
        ).scalar()
        assert count == 1

    def test_requires_auth(self, client: TestClient, sample_company):
        response = client.post("/api/v1/reviews", json=review_payload(sample_company.id))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestReviewServiceRules:
    """The service re-checks the rules for callers that bypass the schemas."""

    def test_clean_rating_rejects_bool_and_float(self):
        with pytest.raises(ValidationError):
            review_service.clean_rating(True)
        with pytest.raises(ValidationError):
            review_service.clean_rating(4.0)

    def test_clean_title(self):
        assert review_service.clean_title(None) == "Review"
        assert review_service.clean_title("  Hi  ") == "Hi"
        with pytest.raises(ValidationError):
            review_service.clean_title("x" * 101)

    def test_duplicate_via_service(
        self, db_session: Session, sample_company, sample_user, sample_review
    ):
        data = ReviewCreate(
            company_id=sample_company.id,
            rating=3,
            comment="Trying to review the same company twice.",
        )

        with pytest.raises(ConflictError):
            review_service.create_review(db_session, sample_user, data)


# =============================================================================
# Read
# =============================================================================


class TestGetReview:
    """Tests for GET /api/v1/reviews/{review_id}"""

    def test_get(self, client: TestClient, sample_review):
        response = client.get(f"/api/v1/reviews/{sample_review.id}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == sample_review.id
        assert data["company"]["name"] == "Acme"

    def test_not_found(self, client: TestClient):
        response = client.get("/api/v1/reviews/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Review not found"}

    def test_orphan_has_no_company(
        self, client: TestClient, sample_company, sample_review, auth_headers: dict
    ):
        client.delete(f"/api/v1/companies/{sample_company.id}", headers=auth_headers)

        data = client.get(f"/api/v1/reviews/{sample_review.id}").json()

        assert data["company_id"] is None
        assert data["company"] is None


class TestListReviews:
    def test_company_reviews_newest_first(
        self, client: TestClient, sample_company, make_review
    ):
        older = make_review(sample_company, 2)
        newer = make_review(sample_company, 5)

        response = client.get(f"/api/v1/reviews/company/{sample_company.id}")

        assert response.status_code == status.HTTP_200_OK
        assert [review["id"] for review in response.json()] == [newer.id, older.id]

    def test_company_without_reviews(self, client: TestClient, sample_company):
        assert client.get(f"/api/v1/reviews/company/{sample_company.id}").json() == []

    def test_user_reviews(
        self,
        client: TestClient,
        sample_user,
        sample_category,
        make_company,
        make_review,
    ):
        first = make_review(make_company("First", sample_category), 4, user=sample_user)
        second = make_review(make_company("Second", sample_category), 2, user=sample_user)
        make_review(make_company("Third", sample_category), 5)

        data = client.get(f"/api/v1/reviews/user/{sample_user.id}").json()

        assert [review["id"] for review in data] == [second.id, first.id]
        assert data[0]["company"]["name"] == "Second"


# =============================================================================
# Update & Delete
# =============================================================================


class TestUpdateReview:
    """Tests for PUT /api/v1/reviews/{review_id}"""

    def test_update_own_review(self, client: TestClient, sample_review, auth_headers: dict):
        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            headers=auth_headers,
            json={"rating": 2},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["rating"] == 2
        # Fields not sent keep their value
        assert data["title"] == "Solid service"
        assert data["comment"] == "Support answered quickly and fixed my issue."

    def test_update_is_reflected_in_stats(
        self, client: TestClient, sample_company, sample_review, auth_headers: dict
    ):
        client.put(
            f"/api/v1/reviews/{sample_review.id}", headers=auth_headers, json={"rating": 1}
        )

        stats = client.get(f"/api/v1/reviews/stats/{sample_company.id}").json()

        assert stats["avg_rating"] == 1.0
        assert stats["distribution"]["1"] == 1

    def test_update_other_users_review(
        self, client: TestClient, sample_review, second_auth_headers: dict
    ):
        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            headers=second_auth_headers,
            json={"rating": 1},
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "Not authorized to modify this review"}

    def test_update_invalid_rating(self, client: TestClient, sample_review, auth_headers: dict):
        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            headers=auth_headers,
            json={"rating": 9},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_not_found(self, client: TestClient, auth_headers: dict):
        response = client.put(
            "/api/v1/reviews/99999", headers=auth_headers, json={"rating": 3}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_via_service_ignores_nulls(
        self, db_session: Session, sample_user, sample_review
    ):
        review = review_service.update_review(
            db_session, sample_user, sample_review.id, ReviewUpdate(title=None, comment=None)
        )

        assert review.title == "Solid service"


class TestDeleteReview:
    """Tests for DELETE /api/v1/reviews/{review_id}"""

    def test_delete_own_review(
        self, client: TestClient, db_session: Session, sample_review, auth_headers: dict
    ):
        review_id = sample_review.id

        response = client.delete(f"/api/v1/reviews/{review_id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Review deleted successfully"}
        db_session.expunge_all()
        assert db_session.get(Review, review_id) is None

    def test_delete_other_users_review(
        self, client: TestClient, sample_review, second_auth_headers: dict
    ):
        response = client.delete(
            f"/api/v1/reviews/{sample_review.id}", headers=second_auth_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_review_again_after_delete(
        self, client: TestClient, sample_company, sample_review, auth_headers: dict
    ):
        client.delete(f"/api/v1/reviews/{sample_review.id}", headers=auth_headers)

        response = client.post(
            "/api/v1/reviews", headers=auth_headers, json=review_payload(sample_company.id)
        )

        assert response.status_code == status.HTTP_201_CREATED

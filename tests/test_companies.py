"""
Tests for the Company Endpoints

CRUD and lookups under /api/v1/companies. The discovery feeds served from
this router are covered in test_ranking, test_sampler and test_feeds.
"""

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from reviewhub.models import Review
from reviewhub.models.company import DEFAULT_COMPANY_LOGO


class TestListCompanies:
    """Tests for GET /api/v1/companies"""

    def test_list_all(self, client: TestClient, sample_company, make_company):
        make_company("Bytewise")

        response = client.get("/api/v1/companies")

        assert response.status_code == status.HTTP_200_OK
        assert [company["name"] for company in response.json()] == ["Acme", "Bytewise"]

    def test_filter_by_category(
        self, client: TestClient, sample_company, make_category, make_company
    ):
        other = make_category("Travel")
        make_company("SkyHop", other)

        data = client.get(f"/api/v1/companies?category_id={other.id}").json()

        assert [company["name"] for company in data] == ["SkyHop"]

    def test_by_category_path(self, client: TestClient, sample_company):
        data = client.get(f"/api/v1/companies/category/{sample_company.category_id}").json()

        assert [company["slug"] for company in data] == ["acme"]

    def test_by_subcategory_path(self, client: TestClient, sample_company):
        data = client.get(
            f"/api/v1/companies/subcategory/{sample_company.subcategory_id}"
        ).json()

        assert [company["slug"] for company in data] == ["acme"]


class TestListCompaniesBySlug:
    """Tests for GET /api/v1/companies/{category,subcategory}/slug/{slug}"""

    def test_by_category_slug(
        self,
        client: TestClient,
        sample_company,
        sample_category,
        sample_subcategory,
        make_category,
        make_company,
    ):
        travel = make_category("Travel")
        # Filed under a Technology subcategory, so listed there
        make_company("Stray", travel, sample_subcategory)
        # No subcategory, so not listed under any category slug
        make_company("Loose", sample_category)

        response = client.get("/api/v1/companies/category/slug/technology")

        assert response.status_code == status.HTTP_200_OK
        assert [company["name"] for company in response.json()] == ["Acme", "Stray"]

    def test_by_category_slug_not_found(self, client: TestClient):
        response = client.get("/api/v1/companies/category/slug/nope")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Category not found"}

    def test_by_subcategory_slug(
        self, client: TestClient, sample_company, sample_category, make_subcategory, make_company
    ):
        hardware = make_subcategory("Hardware", sample_category, slug="hardware")
        make_company("Chipworks", sample_category, hardware)

        response = client.get("/api/v1/companies/subcategory/slug/software")

        assert response.status_code == status.HTTP_200_OK
        assert [company["slug"] for company in response.json()] == ["acme"]

    def test_by_subcategory_slug_not_found(self, client: TestClient):
        response = client.get("/api/v1/companies/subcategory/slug/nope")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Subcategory not found"}


class TestCreateCompany:
    """Tests for POST /api/v1/companies"""

    def test_create(self, client: TestClient, sample_subcategory, auth_headers: dict):
        response = client.post(
            "/api/v1/companies",
            headers=auth_headers,
            json={
                "name": "Acme Corp",
                "url": "https://acme.example",
                "subcategory_id": sample_subcategory.id,
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["slug"] == "acme-corp"
        assert data["category"]["slug"] == "technology"
        assert data["subcategory"]["slug"] == "software"
        assert data["logo"] == DEFAULT_COMPANY_LOGO

    def test_create_without_placement(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/companies", headers=auth_headers, json={"name": "Misc Goods"}
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["category"]["name"] == "General"
        assert data["subcategory"]["name"] == "General"

    def test_same_name_twice(self, client: TestClient, sample_company, auth_headers: dict):
        response = client.post(
            "/api/v1/companies",
            headers=auth_headers,
            json={"name": "Acme", "category_id": sample_company.category_id},
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["slug"] == "acme-1"

    def test_name_without_letters(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/v1/companies", headers=auth_headers, json={"name": "!!!"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_requires_auth(self, client: TestClient):
        response = client.post("/api/v1/companies", json={"name": "Acme"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestCompanyLookups:
    def test_by_slug(self, client: TestClient, sample_company):
        response = client.get("/api/v1/companies/slug/acme")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == sample_company.id

    def test_by_slug_not_found(self, client: TestClient):
        response = client.get("/api/v1/companies/slug/nope")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Company not found"}

    def test_with_ratings(self, client: TestClient, sample_company, make_review):
        for rating in [5, 5, 5, 4, 3]:
            make_review(sample_company, rating)

        response = client.get("/api/v1/companies/slug/acme/with-ratings")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["company"]["name"] == "Acme"
        assert data["avg_rating"] == 4.4
        assert data["review_count"] == 5
        assert data["rating_breakdown"] == {"1": 0, "2": 0, "3": 1, "4": 1, "5": 3}

    def test_with_ratings_no_reviews(self, client: TestClient, sample_company):
        data = client.get("/api/v1/companies/slug/acme/with-ratings").json()

        assert data["avg_rating"] == 0
        assert data["review_count"] == 0


class TestUpdateCompany:
    """Tests for PUT /api/v1/companies/{company_id}"""

    def test_rename(self, client: TestClient, sample_company, auth_headers: dict):
        response = client.put(
            f"/api/v1/companies/{sample_company.id}",
            headers=auth_headers,
            json={"name": "Acme Global", "logo": "https://cdn.example/acme.png"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["slug"] == "acme-global"
        assert data["logo"] == "https://cdn.example/acme.png"

    def test_unknown(self, client: TestClient, auth_headers: dict):
        response = client.put(
            "/api/v1/companies/99999", headers=auth_headers, json={"name": "Ghost"}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestDeleteCompany:
    """Tests for DELETE /api/v1/companies/{company_id}"""

    def test_delete_keeps_reviews(
        self,
        client: TestClient,
        db_session: Session,
        sample_company,
        sample_review,
        auth_headers: dict,
    ):
        response = client.delete(
            f"/api/v1/companies/{sample_company.id}", headers=auth_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Company deleted successfully"}

        db_session.expire_all()
        assert db_session.get(Review, sample_review.id).company_id is None
        assert client.get("/api/v1/companies/slug/acme").status_code == 404

    def test_unknown(self, client: TestClient, auth_headers: dict):
        response = client.delete("/api/v1/companies/99999", headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

# backend/tests/integration/test_specialty_routes.py
import pytest

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def catalog(specialty_factory):
    specialty_factory("Traditional", category="style", description="Bold lines and a limited palette")
    specialty_factory("Geometric", category="style", description="Sacred geometry and linework")
    specialty_factory("Cover-up work", category="technique")


class TestSpecialtyRoutes:
    def test_lists_alphabetically(self, client):
        response = client.get("/api/specialties")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [s["name"] for s in body["data"]] == ["Cover-up work", "Geometric", "Traditional"]
        assert set(body["data"][0]) == {"id", "name", "category", "description"}

    def test_search_matches_name_or_description(self, client):
        response = client.get("/api/specialties", params={"search": "LINE"})
        assert [s["name"] for s in response.json()["data"]] == ["Geometric", "Traditional"]

    def test_category_filter(self, client):
        response = client.get("/api/specialties", params={"category": "technique"})
        assert [s["name"] for s in response.json()["data"]] == ["Cover-up work"]

    def test_specialty_ids_drive_the_profile_facet(self, client, profile_factory, db):
        from inkmatch.models.specialty import Specialty

        geometric = db.query(Specialty).filter_by(name="Geometric").one()
        profile_factory("Geo", specialties=[geometric])
        profile_factory("Other")

        specialty_id = next(
            s["id"] for s in client.get("/api/specialties").json()["data"] if s["name"] == "Geometric"
        )
        response = client.get("/api/profiles", params={"specialties": specialty_id})
        assert [p["name"] for p in response.json()["data"]] == ["Geo"]

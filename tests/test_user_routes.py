"""Route tests for the protected profile endpoints and the job catalogue."""

from bson import ObjectId
from fastapi.testclient import TestClient

from portal.core.security import get_access_codec


def _auth_headers(client: TestClient) -> dict:
    register = client.post(
        "/api/v1/users/register",
        data={
            "fullname": "Alice Liddell",
            "email": "a@x.com",
            "username": "alice",
            "password": "p1",
            "mobileNumber": "5550100",
            "birthDate": "2001-04-02",
        },
    )
    assert register.status_code == 201, register.text
    login = client.post("/api/v1/users/login", json={"username": "alice", "password": "p1"})
    return {"Authorization": f"Bearer {login.json()['data']['accessToken']}"}


class TestRequestGate:

    def test_no_token(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/users/current-user")
        assert response.status_code == 401
        assert response.json() == {"status": 401, "message": "Unauthorized request"}

    def test_bad_token(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/users/current-user", headers={"Authorization": "Bearer junk"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid access token"

    def test_token_for_unknown_user(self, test_client: TestClient) -> None:
        token = get_access_codec().sign(str(ObjectId()))
        response = test_client.get("/api/v1/users/current-user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_access_token_from_cookie(self, https_client: TestClient) -> None:
        _auth_headers(https_client)
        response = https_client.get("/api/v1/users/current-user")
        assert response.status_code == 200
        assert response.json()["data"]["username"] == "alice"


class TestProfile:

    def test_current_user(self, test_client: TestClient) -> None:
        headers = _auth_headers(test_client)
        response = test_client.get("/api/v1/users/current-user", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == 200
        assert body["data"]["email"] == "a@x.com"
        assert body["data"]["qualifications"] == []
        assert "password" not in body["data"]

    def test_update_account(self, test_client: TestClient) -> None:
        headers = _auth_headers(test_client)
        response = test_client.patch(
            "/api/v1/users/update-account", json={"fullname": "Alice L.", "email": "alice@x.com"}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["fullname"] == "Alice L."
        assert response.json()["data"]["email"] == "alice@x.com"

    def test_update_account_requires_both_fields(self, test_client: TestClient) -> None:
        headers = _auth_headers(test_client)
        missing = test_client.patch("/api/v1/users/update-account", json={"fullname": "Alice"}, headers=headers)
        assert missing.status_code == 400
        assert missing.json()["status"] == 400

        blank = test_client.patch(
            "/api/v1/users/update-account", json={"fullname": " ", "email": "a@x.com"}, headers=headers
        )
        assert blank.status_code == 400

    def test_profile_image_upload(self, test_client: TestClient, image_host) -> None:
        headers = _auth_headers(test_client)
        response = test_client.patch(
            "/api/v1/users/profile-image",
            files={"profileImage": ("me.png", b"\x89PNG fake", "image/png")},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["profileImage"] == "https://images.example/1.png"

    def test_profile_image_missing(self, test_client: TestClient) -> None:
        headers = _auth_headers(test_client)
        response = test_client.patch("/api/v1/users/profile-image", headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Profile image file is missing"

    def test_cover_image_upload_failure(self, test_client: TestClient, image_host) -> None:
        headers = _auth_headers(test_client)
        image_host.fail = True
        response = test_client.patch(
            "/api/v1/users/cover-image",
            files={"coverImage": ("c.png", b"\x89PNG fake", "image/png")},
            headers=headers,
        )
        assert response.status_code == 400


class TestQualifications:

    def test_add_qualification(self, test_client: TestClient) -> None:
        headers = _auth_headers(test_client)
        response = test_client.post(
            "/api/v1/users/qualifications",
            json={"qualification": {"degree": "BSc", "startYear": 2019, "endYear": 2022}},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["qualifications"] == [{"degree": "BSc", "startYear": 2019, "endYear": 2022}]

    def test_missing_end_year(self, test_client: TestClient) -> None:
        headers = _auth_headers(test_client)
        response = test_client.post(
            "/api/v1/users/qualifications",
            json={"qualification": {"degree": "BSc", "startYear": 2019}},
            headers=headers,
        )
        assert response.status_code == 400
        assert "endYear" in response.json()["message"]

        me = test_client.get("/api/v1/users/current-user", headers=headers)
        assert me.json()["data"]["qualifications"] == []


class TestAppliedJobs:

    def test_apply_twice(self, test_client: TestClient, job_store) -> None:
        headers = _auth_headers(test_client)
        job_id = job_store.add(title="Backend Intern", company="Acme", description="d", impression="i")

        first = test_client.post("/api/v1/users/applied-jobs", json={"jobId": job_id}, headers=headers)
        assert first.status_code == 200

        second = test_client.post("/api/v1/users/applied-jobs", json={"jobId": job_id}, headers=headers)
        assert second.status_code == 400
        assert second.json() == {"status": 400, "message": "Job already applied"}

        listed = test_client.get("/api/v1/users/applied-jobs", headers=headers)
        jobs = listed.json()["data"]
        assert [j["_id"] for j in jobs] == [job_id]
        assert "description" not in jobs[0]
        assert "impression" not in jobs[0]

    def test_apply_without_job_id(self, test_client: TestClient) -> None:
        headers = _auth_headers(test_client)
        response = test_client.post("/api/v1/users/applied-jobs", json={}, headers=headers)
        assert response.status_code == 400

    def test_apply_unknown_job(self, test_client: TestClient) -> None:
        headers = _auth_headers(test_client)
        response = test_client.post("/api/v1/users/applied-jobs", json={"jobId": str(ObjectId())}, headers=headers)
        assert response.status_code == 404


class TestJobs:

    def test_list_and_get(self, test_client: TestClient, job_store) -> None:
        job_id = job_store.add(title="Backend Intern", company="Acme", description="long", impression="long")
        job_store.add(title="Designer", company="Acme")

        listed = test_client.get("/api/v1/jobs", params={"search": "backend"})
        assert listed.status_code == 200
        data = listed.json()["data"]
        assert data["total"] == 1
        assert data["jobs"][0]["_id"] == job_id
        assert "description" not in data["jobs"][0]

        detail = test_client.get(f"/api/v1/jobs/{job_id}")
        assert detail.status_code == 200
        assert detail.json()["data"]["description"] == "long"

    def test_get_missing_job(self, test_client: TestClient) -> None:
        response = test_client.get(f"/api/v1/jobs/{ObjectId()}")
        assert response.status_code == 404
        assert response.json() == {"status": 404, "message": "Job not found"}

    def test_job_with_object_id_fields(self, test_client: TestClient, job_store) -> None:
        poster = ObjectId()
        job_id = job_store.add(title="Dev", company="Acme", posted_by=poster, meta={"reviewers": [poster]})

        detail = test_client.get(f"/api/v1/jobs/{job_id}")
        assert detail.status_code == 200
        assert detail.json()["data"]["posted_by"] == str(poster)
        assert detail.json()["data"]["meta"] == {"reviewers": [str(poster)]}

        listed = test_client.get("/api/v1/jobs")
        assert listed.status_code == 200
        assert listed.json()["data"]["jobs"][0]["posted_by"] == str(poster)

        headers = _auth_headers(test_client)
        test_client.post("/api/v1/users/applied-jobs", json={"jobId": job_id}, headers=headers)
        applied = test_client.get("/api/v1/users/applied-jobs", headers=headers)
        assert applied.status_code == 200
        assert applied.json()["data"][0]["posted_by"] == str(poster)

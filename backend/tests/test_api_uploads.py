import io

from conftest import XLSX, blobs, xlsx_bytes


def _file(name="notes.txt", data=b"hello world", mime="text/plain"):
    return (name, io.BytesIO(data), mime)


# ======================================================
# Upload
# ======================================================

def test_upload_single(client, auth_headers, settings):
    res = client.post("/api/v1/uploads", files={"file": _file()}, headers=auth_headers)

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "File uploaded successfully"
    assert body["timestamp"].endswith("Z")

    data = body["data"]
    assert data["originalName"] == "notes.txt"
    assert data["mimeType"] == "text/plain"
    assert data["sizeBytes"] == 11
    assert data["ownerId"] == "u-42"
    assert data["accessUrl"] == f"/api/v1/uploads/files/{data['storageId']}"
    assert blobs(settings) == [data["storageId"]]


def test_upload_requires_auth(client, settings):
    res = client.post("/api/v1/uploads", files={"file": _file()})
    assert res.status_code in (401, 403)
    assert res.json()["success"] is False
    assert blobs(settings) == []


def test_upload_without_file(client, auth_headers):
    res = client.post("/api/v1/uploads", headers=auth_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "No file uploaded"


def test_upload_disallowed_type(client, auth_headers, settings):
    res = client.post(
        "/api/v1/uploads",
        files={"file": _file("tool.exe", b"MZ", "application/x-msdownload")},
        headers=auth_headers,
    )
    assert res.status_code == 400
    assert res.json()["message"].startswith("Invalid file type")
    assert blobs(settings) == []


def test_upload_batch(client, auth_headers, settings):
    files = [("files", _file(f"f{i}.txt", b"x" * i)) for i in range(3)]
    res = client.post("/api/v1/uploads/batch", files=files, headers=auth_headers)

    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "3 files uploaded successfully"
    assert [d["originalName"] for d in body["data"]] == ["f0.txt", "f1.txt", "f2.txt"]
    assert len(blobs(settings)) == 3


def test_upload_batch_of_six_stores_nothing(client, auth_headers, settings):
    files = [("files", _file(f"f{i}.txt")) for i in range(6)]
    res = client.post("/api/v1/uploads/batch", files=files, headers=auth_headers)

    assert res.status_code == 400
    assert res.json()["message"] == "Too many files"
    assert blobs(settings) == []


def test_upload_batch_empty(client, auth_headers):
    res = client.post("/api/v1/uploads/batch", headers=auth_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "No files uploaded"


# ======================================================
# Serve / describe / delete
# ======================================================

def _upload(client, auth_headers, **kw):
    res = client.post("/api/v1/uploads", files={"file": _file(**kw)}, headers=auth_headers)
    return res.json()["data"]


def test_serve_file(client, auth_headers):
    data = _upload(client, auth_headers, name="pic.PNG", data=b"\x89PNG\r\n\x1a\n" + b"0" * 100, mime="image/png")

    res = client.get(data["accessUrl"])
    assert res.status_code == 200
    assert res.content == b"\x89PNG\r\n\x1a\n" + b"0" * 100
    assert res.headers["content-type"] == "image/png"
    assert res.headers["content-length"] == "108"
    assert res.headers["content-disposition"] == f'inline; filename="{data["storageId"]}"'


def test_serve_releases_file_handle(client, auth_headers, app, monkeypatch):
    data = _upload(client, auth_headers, name="a.txt", data=b"hello")
    store = app.state.blob_store
    readers = []
    real_iter_chunks = store.iter_chunks

    def spy_iter_chunks(storage_id, *args, **kwargs):
        readers.append(real_iter_chunks(storage_id, *args, **kwargs))
        return readers[-1]

    monkeypatch.setattr(store, "iter_chunks", spy_iter_chunks)
    res = client.get(data["accessUrl"])

    assert res.content == b"hello"
    assert len(readers) == 1
    assert readers[0].closed


def test_serve_empty_file(client, auth_headers):
    data = _upload(client, auth_headers, name="empty.txt", data=b"")

    res = client.get(data["accessUrl"])
    assert res.status_code == 200
    assert res.headers["content-length"] == "0"
    assert res.content == b""


def test_serve_missing_file(client):
    res = client.get("/api/v1/uploads/files/does-not-exist.pdf")
    assert res.status_code == 404
    assert res.json() == {
        "success": False,
        "message": "File not found",
        "error": "does-not-exist.pdf",
        "timestamp": res.json()["timestamp"],
    }


def test_serve_rejects_traversal(client):
    res = client.get("/api/v1/uploads/files/..%2F..%2Fetc%2Fpasswd")
    assert res.status_code == 404


def test_describe_file(client, auth_headers):
    data = _upload(client, auth_headers)
    res = client.get(f"/api/v1/uploads/files/{data['storageId']}/info")
    assert res.status_code == 200
    assert res.json()["data"] == data


def test_delete_file(client, auth_headers, settings):
    data = _upload(client, auth_headers)
    url = data["accessUrl"]

    res = client.delete(url, headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["message"] == "File deleted successfully"
    assert res.json()["data"] == {"filename": data["storageId"]}
    assert blobs(settings) == []

    assert client.get(url).status_code == 404
    assert client.delete(url, headers=auth_headers).status_code == 404


# ======================================================
# Import
# ======================================================

def _sheet(rows, name="students.xlsx", mime=XLSX):
    return {"file": (name, io.BytesIO(xlsx_bytes(rows)), mime)}


def test_import_students(client, auth_headers, settings, imported):
    res = client.post(
        "/api/v1/uploads/import",
        files=_sheet([
            {"name": "A", "email": "a@x.com", "registration_no": "R1"},
            {"name": "B", "email": None, "registration_no": None},
        ]),
        data={"importType": "students"},
        headers=auth_headers,
    )

    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Excel import completed. 1 records imported successfully."
    assert body["data"] == {
        "totalRows": 2,
        "successCount": 1,
        "errorCount": 1,
        "errors": ["Row 2: Missing required fields (name, email, registration_no)"],
    }
    assert [kind for kind, _ in imported] == ["students"]
    assert blobs(settings) == []


def test_import_csv_sent_as_excel(client, auth_headers, settings, imported):
    res = client.post(
        "/api/v1/uploads/import",
        files={"file": (
            "students.csv",
            io.BytesIO(b"name,email,registration_no\nA,a@x.com,R1\n"),
            "application/vnd.ms-excel",
        )},
        data={"importType": "students"},
        headers=auth_headers,
    )

    assert res.status_code == 200
    assert res.json()["data"]["successCount"] == 1
    assert len(imported) == 1
    kind, record = imported[0]
    assert kind == "students"
    assert record["registration_no"] == "R1"
    assert blobs(settings) == []


def test_import_requires_type(client, auth_headers):
    res = client.post("/api/v1/uploads/import", files=_sheet([{"name": "A"}]), headers=auth_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "Import type is required"


def test_import_invalid_type(client, auth_headers, settings):
    res = client.post(
        "/api/v1/uploads/import",
        files=_sheet([{"name": "A"}]),
        data={"importType": "grades"},
        headers=auth_headers,
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid import type"
    assert blobs(settings) == []


def test_import_non_spreadsheet(client, auth_headers):
    res = client.post(
        "/api/v1/uploads/import",
        files={"file": ("doc.pdf", io.BytesIO(b"%PDF"), "application/pdf")},
        data={"importType": "students"},
        headers=auth_headers,
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid file type. Only Excel (.xls, .xlsx) or CSV files are allowed."


def test_import_broken_workbook(client, auth_headers, settings):
    res = client.post(
        "/api/v1/uploads/import",
        files={"file": ("bad.xlsx", io.BytesIO(b"PK\x03\x04garbage"), XLSX)},
        data={"importType": "students"},
        headers=auth_headers,
    )
    assert res.status_code == 500
    body = res.json()
    assert body["message"] == "Failed to import Excel data"
    assert body["error"]
    assert blobs(settings) == []


def test_import_without_file(client, auth_headers):
    res = client.post("/api/v1/uploads/import", data={"importType": "students"}, headers=auth_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "No file uploaded"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

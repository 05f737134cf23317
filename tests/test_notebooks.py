import base64
import io
import json
import zipfile

import pytest

from wsops.core.adapters.workspace import WorkspaceAdapter
from wsops.core.errors import InvalidPath, NotFound, RemoteError
from wsops.core.fingerprint import fingerprint
from wsops.core.models import (
    DesiredNotebook,
    ExportFormat,
    Language,
    ObjectKind,
    ObjectStatus,
)
from wsops.core.notebooks import (
    create_notebook,
    delete_notebook,
    in_sync,
    notebook_drift,
    read_notebook,
    remove_declared,
)
from wsops.core.remote import RemoteCaller


class _Workspace:
    """In-memory workspace that records every call."""

    def __init__(self, directories=(), fail: dict[str, Exception] | None = None):
        self.directories = set(directories)
        self.notebooks: dict[str, tuple[str, Language]] = {}
        self.fail = fail or {}
        self.calls: list[tuple] = []
        self.next_id = 4567

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail:
            raise self.fail[op]

    def get_status(self, path):
        self.calls.append(("get_status", path))
        self._maybe_fail("get_status")
        if path in self.directories:
            return ObjectStatus(object_id=1, object_type=ObjectKind.DIRECTORY, path=path)
        if path in self.notebooks:
            return ObjectStatus(
                object_id=self.next_id,
                object_type=ObjectKind.NOTEBOOK,
                path=path,
                language=self.notebooks[path][1],
            )
        raise NotFound("NOT_FOUND", "not found", 404)

    def mkdirs(self, path):
        self.calls.append(("mkdirs", path))
        self._maybe_fail("mkdirs")
        self.directories.add(path)

    def import_notebook(self, path, content, language, fmt, overwrite):
        self.calls.append(("import", path, language, fmt, overwrite))
        self._maybe_fail("import")
        self.notebooks[path] = (content, language)

    def export(self, path, fmt):
        self.calls.append(("export", path, fmt))
        self._maybe_fail("export")
        if path not in self.notebooks:
            raise NotFound("NOT_FOUND", "Item not found", 404)
        return self.notebooks[path][0]

    def delete(self, path, recursive):
        self.calls.append(("delete", path, recursive))
        self._maybe_fail("delete")
        self.notebooks.pop(path, None)
        self.directories.discard(path)


def _desired(**kwargs) -> DesiredNotebook:
    values = {"path": "/path.py", "content": "YWJjCg==", "language": Language.PYTHON}
    values.update(kwargs)
    return DesiredNotebook(**values)


def _dbc(commands: list[dict], name: str = "nb.python") -> str:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr(name, json.dumps({"commands": commands}))
    return base64.b64encode(buf.getvalue()).decode("ascii")


def test_create_reports_remote_state():
    ws = _Workspace()

    state = create_notebook(ws, _desired())

    assert state.id == "/path.py"
    assert state.path == "/path.py"
    assert state.content == fingerprint("YWJjCg==", ExportFormat.SOURCE)
    assert state.language is Language.PYTHON
    assert state.object_id == 4567
    assert state.object_type is ObjectKind.NOTEBOOK
    assert ws.calls == [
        ("import", "/path.py", Language.PYTHON, ExportFormat.SOURCE, True),
        ("export", "/path.py", ExportFormat.SOURCE),
        ("get_status", "/path.py"),
    ]


def test_create_with_mkdirs_creates_missing_parent():
    ws = _Workspace()

    create_notebook(ws, _desired(path="/test/path.py", mkdirs=True))

    assert ws.calls[:3] == [
        ("get_status", "/test"),
        ("mkdirs", "/test"),
        ("import", "/test/path.py", Language.PYTHON, ExportFormat.SOURCE, True),
    ]


def test_create_with_mkdirs_skips_existing_parent():
    ws = _Workspace(directories={"/test"})

    create_notebook(ws, _desired(path="/test/path.py", mkdirs=True))

    assert ("mkdirs", "/test") not in ws.calls


def test_create_without_mkdirs_does_not_touch_parent():
    ws = _Workspace()

    create_notebook(ws, _desired(path="/test/path.py"))

    assert [c[0] for c in ws.calls] == ["import", "export", "get_status"]


def test_create_at_top_level_with_mkdirs_skips_parent():
    ws = _Workspace()

    create_notebook(ws, _desired(mkdirs=True))

    assert [c[0] for c in ws.calls] == ["import", "export", "get_status"]


def test_create_always_overwrites():
    ws = _Workspace()

    create_notebook(ws, _desired(overwrite=False))

    assert ws.calls[0][-1] is True


def test_create_fingerprints_what_the_workspace_holds():
    ws = _Workspace()
    original = ws.import_notebook

    def _rewriting_import(path, content, language, fmt, overwrite):
        original(path, "ZGlmZmVyZW50Cg==", language, fmt, overwrite)

    ws.import_notebook = _rewriting_import

    state = create_notebook(ws, _desired())

    assert state.content == fingerprint("ZGlmZmVyZW50Cg==", "SOURCE")
    assert notebook_drift(_desired(), state) == ["content"]


def test_create_error_is_surfaced_verbatim():
    ws = _Workspace(fail={"import": RemoteError("INVALID_REQUEST", "Internal error happened", 400)})

    with pytest.raises(RemoteError) as exc_info:
        create_notebook(ws, _desired())

    assert str(exc_info.value).startswith("Internal error happened")
    assert "/path.py" not in ws.notebooks


def test_create_mkdirs_error_aborts_before_import():
    ws = _Workspace(fail={"mkdirs": RemoteError("PERMISSION_DENIED", "no access", 403)})

    with pytest.raises(RemoteError, match="no access"):
        create_notebook(ws, _desired(path="/test/path.py", mkdirs=True))

    assert not any(c[0] == "import" for c in ws.calls)


@pytest.mark.parametrize("path", ["", "path.py"])
def test_create_rejects_invalid_path_before_any_call(path):
    ws = _Workspace()

    with pytest.raises(InvalidPath):
        create_notebook(ws, _desired(path=path, mkdirs=True))

    assert ws.calls == []


def test_read_reports_language_and_object_id():
    ws = _Workspace()
    ws.notebooks["/test/path.py"] = ("YWJjCg==", Language.PYTHON)

    state = read_notebook(ws, "/test/path.py", ExportFormat.SOURCE)

    assert state is not None
    assert state.id == "/test/path.py"
    assert state.content == fingerprint("YWJjCg==", "SOURCE")
    assert state.language is Language.PYTHON
    assert state.object_id == 4567
    assert state.format is ExportFormat.SOURCE


def test_read_missing_notebook_is_absent():
    ws = _Workspace()

    assert read_notebook(ws, "/test/path.py") is None
    assert ws.calls == [("export", "/test/path.py", ExportFormat.SOURCE)]


def test_read_status_not_found_is_absent():
    ws = _Workspace(fail={"get_status": NotFound("NOT_FOUND", "gone", 404)})
    ws.notebooks["/test/path.py"] = ("YWJjCg==", Language.PYTHON)

    assert read_notebook(ws, "/test/path.py") is None


def test_read_error_is_raised():
    ws = _Workspace(fail={"export": RemoteError("INVALID_REQUEST", "Internal error happened", 400)})

    with pytest.raises(RemoteError, match="^Internal error happened"):
        read_notebook(ws, "/test/path.py")


def test_delete_passes_recursive_flag():
    ws = _Workspace()

    delete_notebook(ws, "/test/path.py")
    delete_notebook(ws, "/test/other.py", recursive=False)

    assert ws.calls == [
        ("delete", "/test/path.py", True),
        ("delete", "/test/other.py", False),
    ]


def test_delete_then_read_is_absent():
    ws = _Workspace()
    create_notebook(ws, _desired())

    delete_notebook(ws, "/path.py")

    assert read_notebook(ws, "/path.py") is None


def test_delete_error_is_surfaced_verbatim():
    ws = _Workspace(fail={"delete": RemoteError("INVALID_REQUEST", "Internal error happened", 400)})

    with pytest.raises(RemoteError, match="^Internal error happened"):
        delete_notebook(ws, "/abc")


def test_delete_rejects_invalid_path():
    ws = _Workspace()

    with pytest.raises(InvalidPath):
        delete_notebook(ws, "abc")

    assert ws.calls == []


def test_delete_retries_too_many_requests(policy, sleeps):
    class _Response:
        def __init__(self, status_code):
            self.status_code = status_code
            self.content = b""
            self.text = ""

        def json(self):
            raise ValueError("empty")

    class _Session:
        def __init__(self):
            self.responses = [_Response(429), _Response(200)]
            self.requests = []

        def request(self, method, path, *, params=None, json=None):
            self.requests.append((method, path, json))
            return self.responses.pop(0)

    session = _Session()
    adapter = WorkspaceAdapter(RemoteCaller(session, policy))

    delete_notebook(adapter, "/test/path.py")

    assert session.requests == [
        ("POST", "/workspace/delete", {"path": "/test/path.py", "recursive": True}),
        ("POST", "/workspace/delete", {"path": "/test/path.py", "recursive": True}),
    ]
    assert sleeps == [0.5]


def test_in_sync_after_create():
    ws = _Workspace()
    desired = _desired()

    assert in_sync(desired, create_notebook(ws, desired))


def test_drift_for_absent_notebook():
    assert notebook_drift(_desired(), None) == ["absent"]


def test_drift_reports_language_and_path():
    ws = _Workspace()
    state = create_notebook(ws, _desired())

    drift = notebook_drift(_desired(path="/moved.py", language=Language.SCALA), state)

    assert drift == ["path", "language"]


def test_equivalent_dbc_bundles_are_in_sync():
    ws = _Workspace()
    stored = _dbc([{"position": 0, "command": "// header"}, {"position": 1, "command": "1+1"}])
    reordered = _dbc(
        [{"position": 1, "command": "1+1"}, {"position": 0, "command": "// header"}],
        name="renamed.python",
    )

    state = create_notebook(ws, _desired(content=stored, format=ExportFormat.DBC))

    assert stored != reordered
    assert in_sync(_desired(content=reordered, format=ExportFormat.DBC), state)


def test_remove_declared_uses_recursive_delete_flag():
    ws = _Workspace()

    remove_declared(ws, _desired())
    remove_declared(ws, _desired(path="/keep", recursive_delete=False))

    assert ws.calls == [("delete", "/path.py", True), ("delete", "/keep", False)]

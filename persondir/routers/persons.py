from __future__ import annotations

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from persondir.domain.persons import Person, parse_person_id
from persondir.services.person_service import PersonService

router = APIRouter(prefix="/persons", tags=["persons"])


class PersonPayload(BaseModel):
    name: str


def _get_person_service(request: Request) -> PersonService:
    svc = getattr(getattr(request.app, "state", None), "person_service", None)
    if not svc:
        raise RuntimeError("PersonService not configured")
    return svc


@router.post("", status_code=201)
def add_person(payload: PersonPayload, request: Request):
    person_id = _get_person_service(request).add_person(payload.name)
    return {"id": str(person_id)}


@router.get("")
def list_persons(request: Request):
    return [p.to_dict() for p in _get_person_service(request).get_all_persons()]


@router.get("/download")
def download_persons(request: Request):
    body = _get_person_service(request).download_persons_csv()
    return Response(
        body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="persons.csv"'},
    )


@router.post("/upload")
def upload_persons(request: Request, file: UploadFile = File(...)):
    result = _get_person_service(request).process_csv(file.file)
    return {"ok": True, "updated": result.updated, "created": result.created}


@router.get("/{person_id}")
def get_person(person_id: str, request: Request):
    return _get_person_service(request).get_person(parse_person_id(person_id)).to_dict()


@router.put("/{person_id}")
def update_person(person_id: str, payload: PersonPayload, request: Request):
    pid = parse_person_id(person_id)
    _get_person_service(request).update_person(pid, Person(id=pid, name=payload.name))
    return {"ok": True}


@router.delete("/{person_id}")
def delete_person(person_id: str, request: Request):
    _get_person_service(request).delete_person(parse_person_id(person_id))
    return {"ok": True}

from pydantic import BaseModel


def looks_like_email(value: str) -> bool:
    v = value.strip()
    return "@" in v and "." in v.split("@")[-1]


def normalize_email(value: str) -> str:
    v = value.strip().lower()
    if not looks_like_email(v):
        raise ValueError("Invalid email")
    return v


class SimpleOKOut(BaseModel):
    ok: bool = True


class CountOut(BaseModel):
    count: int

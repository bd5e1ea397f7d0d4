"""Check two documents against a Renderable contract."""

from typing import Protocol

from ducktype import DuckTypeError, assert_duck_type


class Renderable(Protocol):
    def render(self) -> str: ...


class PDFDocument:
    def render(self) -> str:
        return "PDF content"


class InvalidDocument:
    def render(self, extra_param) -> str:
        return "Invalid content"


def main() -> None:
    assert_duck_type(PDFDocument(), Renderable)
    print("PDFDocument is Renderable")
    try:
        assert_duck_type(InvalidDocument(), Renderable)
    except DuckTypeError as e:
        print("InvalidDocument is not Renderable:")
        for v in e.violations:
            print("- " + v.detail)


if __name__ == "__main__":
    main()

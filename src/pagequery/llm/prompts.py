from __future__ import annotations

from typing import Literal

QueryKind = Literal["element", "data"]

_QUERY_FORMS = """
A query is either natural language ("List all the products on the page") or
structured, in a GraphQL-like format:
  {
    products_list[] {
      product_name,
      product_price (number),
      product_image
    }
  }
`name[]` asks for a list, `name { ... }` for a single object, and text in
parentheses after a key describes or constrains the value.

For a natural language query choose sensible JSON keys yourself. For a
structured query return exactly the keys of the query, in the same nesting,
and no others. When a value cannot be found return "" for that key.
""".strip()

ELEMENT_SYSTEM_PROMPT = (
    "You are an expert web scraping assistant. The page is given as compacted HTML: a tag "
    "dictionary followed by the minified markup, where every tag was replaced by its dictionary "
    "token. Opening tags carry the element's unique address in parentheses, for example "
    "`t12(eb4)` is an element with address `eb4` whose tag is listed as `t12` in the dictionary; "
    "closing tags are bare tokens. Answer the query by returning the addresses of the matching "
    "elements.\n\n"
    f"{_QUERY_FORMS}\n\n"
    "Every value in your answer must be an element address or \"\". For example\n"
    '  {"form_data": {"form_name": "2b3", "form_submit_button": "4n5"}, "nav_items": ["hy7", "h7t"]}\n'
    "Respond with a single JSON object inside a ```json fenced block and nothing else."
)

DATA_SYSTEM_PROMPT = (
    "You are an expert web scraping assistant. The page is given as Markdown. Answer the query by "
    "extracting the requested data from it.\n\n"
    f"{_QUERY_FORMS}\n\n"
    "Values are the extracted data, converted to the requested type when one is given. For example\n"
    '  {"products_list": [{"product_name": "Product 1", "product_price": 10, "product_image": "image1.jpg"}]}\n'
    "Respond with a single JSON object inside a ```json fenced block and nothing else."
)


def system_prompt(kind: QueryKind) -> str:
    return ELEMENT_SYSTEM_PROMPT if kind == "element" else DATA_SYSTEM_PROMPT


def build_query_message(content: str, query: str, kind: QueryKind = "element") -> dict[str, str]:
    label = "HTML Content" if kind == "element" else "Markdown Content"
    return {"role": "user", "content": f"{label}:\n{content}\n\nQuery:\n{query.strip()}"}

"""Defaults for standalone HTML output."""

STANDALONE_HTML_HEADER = """<!DOCTYPE html>
<html>
  <body>
    <style type="text/css">
      body { font-family: "Fira Sans", arial; }
      td {
        padding: 1em;
      }
      table, td, tr {
        border: 2px solid;
        border-spacing: 0px;
      }
      .ingredient {
        background-color: #ddd;
      }
      .done {
        background-color: #555;
      }
      .amount { color: #555; }
      .seasonings { color: #333; }
    </style>
"""

STANDALONE_HTML_FOOTER = """
  </body>
</html>
"""

AMOUNT_CLASS = "amount"
SEASONINGS_CLASS = "seasonings"
INGREDIENT_CLASS = "ingredient"
ACTION_CLASS = "action"
DONE_CLASS = "done"

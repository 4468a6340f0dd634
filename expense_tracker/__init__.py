"""Top-level package for the Expense Tracker.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``categories`` – the category catalog and keyword classifier
* ``aggregation`` – per-category and per-month spending totals
* ``recommendations`` – the budgeting-advice summarizer
* ``store`` / ``storage`` – the session expense collection and its JSON mirror
* ``app`` – a Streamlit app that ties everything together

To run the app from the command line you can execute:

```bash
streamlit run expense_tracker/app.py
```
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import categories  # noqa: F401  # re-exported for convenience
from . import recommendations  # noqa: F401  # re-exported for convenience


__all__ = ["aggregation", "categories", "recommendations"]

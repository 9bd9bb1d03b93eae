"""WTForms used by the views."""

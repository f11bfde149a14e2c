# UI: preview window and side panels

"""Static HTML served by the web layer: the upload form and the success page."""

import html
from urllib.parse import quote

UPLOAD_FORM = """<!DOCTYPE html>
<html>
<head>
    <title>DOCX to PDF Converter</title>
    <style>
        body { font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto; padding: 20px; }
        .upload-area { border: 2px dashed #ccc; padding: 40px; text-align: center; margin: 20px 0; }
        button { background: #007cba; color: white; padding: 10px 20px; border: none; cursor: pointer; }
        button:hover { background: #005a87; }
    </style>
</head>
<body>
    <h1>DOCX to PDF Converter</h1>
    <form action="/convert" method="post" enctype="multipart/form-data">
        <div class="upload-area">
            <input type="file" name="docx" accept=".docx" required>
            <p>Select a DOCX file to convert to PDF</p>
        </div>
        <button type="submit">Convert to PDF</button>
    </form>
</body>
</html>
"""

# Braces are doubled for str.format
_SUCCESS_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <title>Conversion Complete</title>
    <style>
        body {{ font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto; padding: 20px; }}
        .success {{ background: #d4edda; border: 1px solid #c3e6cb; padding: 15px; border-radius: 5px; }}
        a {{ color: #007cba; text-decoration: none; }}
        a:hover {{ text-decoration: underline; }}
    </style>
</head>
<body>
    <h1>Conversion Complete!</h1>
    <div class="success">
        <p>Your DOCX file has been successfully converted to PDF.</p>
        <p><a href="/download/{href}" download>Download {label}</a></p>
    </div>
    <p><a href="/">Convert another file</a></p>
</body>
</html>
"""


def success_page(artifact_filename: str) -> str:
    return _SUCCESS_TEMPLATE.format(
        href=html.escape(quote(artifact_filename)),
        label=html.escape(artifact_filename),
    )

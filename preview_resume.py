"""CLI shim -- delegates to resume_preview.cli.main().

Usage:
    python preview_resume.py resumes/john.pdf --base-url https://api.example.com
    python preview_resume.py uploads/jane.docx --output preview.html
"""

from resume_preview.cli import main

if __name__ == "__main__":
    main()

"""NoteForest: Markdown note store with frontmatter metadata."""

"""Image conversion plugin: transcoding, resizing, ICO/SVG output and previews."""

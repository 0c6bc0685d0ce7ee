import sys
import os

# to allow autodoc to discover the documented modules
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

project = 'Seatlib'
copyright = '2026, Seatlib contributors'
author = 'Seatlib contributors'

extensions = [
    'sphinx.ext.autodoc',
]

source_suffix = {
    '.rst': 'restructuredtext',
}

templates_path = ['_templates']

exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

html_theme = 'sphinxdoc'

html_static_path = ['_static']

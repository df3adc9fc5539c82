"""
Signing feature.

Places signature, text, date, image, checkbox and radio fields on PDF pages in
percentage space and burns them into the document's own point space
(reportlab overlay per page, merged with pypdf).
"""

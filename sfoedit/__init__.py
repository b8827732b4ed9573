"""
# sfoedit: SFO files for humans

The library is split in two parts:

 1. a generic description of binary layouts: a Layout is an ordered list of
    named and typed fields living in a LayoutRegistry; each layout can
    decode a record from a buffer (from_buffer()) and encode a dictionary
    of values into a buffer (to_buffer()).

 2. the SFO document (sfoedit.sfo.SfoDocument) that uses the layouts to
    load the key/value pairs of a file, to edit them (validating the
    new values) and to export the result.

The document is always exported with the layout recalculated from scratch:
the tables are rebuilt with the keys in alphabetical order so that exporting
twice gives the same bytes.

    document = SfoDocument()
    document.load('PARAM.SFO')
    document.edit_entry('TITLE', 'kebab')
    data = document.export()

"""

"""AST dumping, parsing and indexing, with go-to-definition lookup over file and project indices."""
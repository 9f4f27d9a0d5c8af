# api package

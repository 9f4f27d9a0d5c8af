# utils package

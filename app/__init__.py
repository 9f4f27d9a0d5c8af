# app package

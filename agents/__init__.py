# agents package

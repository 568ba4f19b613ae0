"""Hash, list and set value types kept in named trees of the store."""
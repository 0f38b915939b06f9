ABSTRACT = "ABSTRACT"
""" 
This keyword is used for:
    - Documents (__collection_name__)
    - BsonableDataclasses (__type_id__)

To indicate an item that does not need to be registered.
"""

AUTO = "AUTO_1234"
"""
This is used with BsonableDataclasses to assign a __type_id__ based on the class name.
(This should not be used for Documents, as we want to have stable type ids in the database.)
"""

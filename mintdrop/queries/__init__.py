from mintdrop.queries.chain import *
from mintdrop.queries.distributor import *
from mintdrop.queries.mints import *

from mintdrop.merkle.leaf import *
from mintdrop.merkle.tree import *
from mintdrop.merkle.payload import *
